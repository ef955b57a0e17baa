"""Client-side portal: session state, route guard, request gateway."""

from portal.config import PortalConfig
from portal.storage import (
    SESSION_STORAGE_KEY,
    DurableStorage,
    FileStorage,
    MemoryStorage,
    PersistedSession,
)
from portal.gateway import ApiError, TransportError, RequestGateway
from portal.backends import AuthBackend, InMemoryAuthBackend, HttpAuthBackend, create_backend
from portal.state import SessionContext, SessionSnapshot
from portal.routes import (
    GuardAction,
    GuardDecision,
    GuardState,
    RouteTable,
    landing_route_for,
    protect,
    redirect_if_authenticated,
)
from portal.notifications import Notification, notification_for
from portal.bootstrap import create_session_context
