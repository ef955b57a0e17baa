"""Data access for the portal's auth flows.

AuthBackend is the one interface the session talks to. The in-memory
implementation calls an AuthService directly; the HTTP one goes through
the RequestGateway. create_backend picks one at startup.
"""

from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from auth.documents import DocumentUpload
from auth.service import AuthService
from auth.types import AuthResult, RegisterRequest, UserProfile
from portal.config import PortalConfig
from portal.gateway import GENERIC_ERROR_MESSAGE, ApiError, RequestGateway

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: Any) -> ModelT:
    """Validate a success payload; a malformed one is reported like any failed call."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ApiError(GENERIC_ERROR_MESSAGE, code="INVALID_RESPONSE", details=e.errors()) from e


class AuthBackend(Protocol):
    def register(
        self, payload: RegisterRequest, document: DocumentUpload | None = None
    ) -> AuthResult: ...

    def login(self, email: str, password: str) -> AuthResult: ...

    def fetch_current_user(self, token: str) -> UserProfile: ...

    def logout(self, token: str) -> None: ...


class InMemoryAuthBackend:
    """Calls an in-process AuthService. Raises auth.exceptions errors unchanged."""

    def __init__(self, service: AuthService):
        self._service = service

    def register(
        self, payload: RegisterRequest, document: DocumentUpload | None = None
    ) -> AuthResult:
        return self._service.register(payload, document=document)

    def login(self, email: str, password: str) -> AuthResult:
        return self._service.login(email, password)

    def fetch_current_user(self, token: str) -> UserProfile:
        return self._service.current_user(token)

    def logout(self, token: str) -> None:
        self._service.logout(token)


class HttpAuthBackend:
    """Talks to /api/auth/* over HTTP. Raises portal.gateway.ApiError on failure."""

    def __init__(self, gateway: RequestGateway):
        self._gateway = gateway

    def register(
        self, payload: RegisterRequest, document: DocumentUpload | None = None
    ) -> AuthResult:
        fields = payload.model_dump(mode="json", exclude_none=True)
        if document is None:
            data = self._gateway.post("/auth/register", json=fields)
        else:
            data = self._gateway.post(
                "/auth/register",
                data=fields,
                files={"verificationDocument": (document.filename, document.content)},
            )
        return _parse(AuthResult, data)

    def login(self, email: str, password: str) -> AuthResult:
        data = self._gateway.post("/auth/login", json={"email": email, "password": password})
        return _parse(AuthResult, data)

    def fetch_current_user(self, token: str) -> UserProfile:
        data = self._gateway.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        user = data.get("user") if isinstance(data, dict) else None
        return _parse(UserProfile, user)

    def logout(self, token: str) -> None:
        self._gateway.post("/auth/logout", headers={"Authorization": f"Bearer {token}"})


def create_backend(
    config: PortalConfig,
    gateway: RequestGateway | None = None,
    service: AuthService | None = None,
) -> AuthBackend:
    """Select the backend named by config.backend."""
    if config.backend == "memory":
        if service is None:
            raise ValueError("The memory backend needs an AuthService")
        return InMemoryAuthBackend(service)

    if gateway is None:
        gateway = RequestGateway(config.api_base_url, timeout=config.request_timeout_seconds)
    return HttpAuthBackend(gateway)
