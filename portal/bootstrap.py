"""Startup wiring for the portal: storage, backend, gateway, session."""

import logging

from auth.service import AuthService
from portal.backends import create_backend
from portal.config import PortalConfig
from portal.gateway import RequestGateway
from portal.state import SessionContext
from portal.storage import DurableStorage, FileStorage, MemoryStorage

logger = logging.getLogger(__name__)


def create_storage(config: PortalConfig) -> DurableStorage:
    if config.storage_path is None:
        return MemoryStorage()
    return FileStorage(config.storage_path)


def create_session_context(
    config: PortalConfig,
    service: AuthService | None = None,
    storage: DurableStorage | None = None,
) -> tuple[SessionContext, RequestGateway]:
    """
    Build and hydrate the session.

    The gateway is returned so other portal services share its token
    handling and forced-logout behavior.
    """
    gateway = RequestGateway(config.api_base_url, timeout=config.request_timeout_seconds)
    backend = create_backend(config, gateway=gateway, service=service)
    session = SessionContext(storage or create_storage(config), backend)
    gateway.attach_session(session)

    snapshot = session.hydrate()
    logger.info(
        "Portal session ready (backend=%s, authenticated=%s)",
        config.backend,
        snapshot.is_authenticated,
    )
    return session, gateway
