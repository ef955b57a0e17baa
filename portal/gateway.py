"""Request gateway: decorates outbound API calls and normalizes failures.

Every request carries the session's bearer token when there is one. A 401
from anything other than the sign-in endpoints means the held token is no
longer valid, so the gateway forces a logout once per such response.
"""

import logging
from typing import Any, Callable

import requests

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

# A 401 from these is a credential problem, not a dead session
UNAUTHORIZED_EXEMPT_PATHS = ("/auth/login", "/auth/register", "/auth/logout")


class ApiError(Exception):
    """A failed API call in the single normalized shape {message, status, code, details}."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
        }


class TransportError(ApiError):
    """The request never produced a response (connection refused, timeout, ...)."""


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def normalize_error(response: requests.Response | None, transport_message: str | None) -> ApiError:
    """
    Build an ApiError from a failed response.

    Message priority: body 'message', then body 'error' (string, or the
    message inside an error object), then transport text, then a generic
    fallback.
    """
    data = _json_or_none(response) if response is not None else None
    message = None
    code = None

    if isinstance(data, dict):
        message = data.get("message") if isinstance(data.get("message"), str) else None
        error = data.get("error")
        if isinstance(error, dict):
            message = message or error.get("message")
            code = error.get("code")
        elif isinstance(error, str):
            message = message or error
        code = data.get("code") or code

    return ApiError(
        message=message or transport_message or GENERIC_ERROR_MESSAGE,
        status=response.status_code if response is not None else None,
        code=code,
        details=data,
    )


class RequestGateway:
    """
    Outbound HTTP for the portal, built on requests.

    Usage:
        gateway = RequestGateway("http://localhost:5000/api", token_provider=lambda: token)
        data = gateway.post("/auth/login", json={"email": ..., "password": ...})
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], str | None] | None = None,
        on_unauthorized: Callable[[], Any] | None = None,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider or (lambda: None)
        self._on_unauthorized = on_unauthorized
        self._timeout = timeout
        self._http = session or requests.Session()

    def attach_session(self, session) -> None:
        """Read tokens from, and force logouts on, a SessionContext."""
        self._token_provider = lambda: session.snapshot.token
        self._on_unauthorized = session.logout

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    @staticmethod
    def _is_exempt(path: str) -> bool:
        return any(path.rstrip("/").endswith(exempt) for exempt in UNAUTHORIZED_EXEMPT_PATHS)

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Send a request and return the response payload.

        Envelope responses ({success, data, ...}) are unwrapped to data.

        Raises:
            TransportError: no response within the timeout, or connection failure.
            ApiError: any non-2xx response (or an envelope with success=false).
        """
        request_headers = dict(headers or {})
        if "Authorization" not in request_headers:
            token = self._token_provider()
            if token:
                request_headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._http.request(
                method,
                self._url(path),
                json=json,
                data=data,
                files=files,
                headers=request_headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(str(e) or GENERIC_ERROR_MESSAGE) from e

        if not response.ok:
            if response.status_code == 401 and not self._is_exempt(path):
                logger.info("401 from %s; ending session", path)
                if self._on_unauthorized is not None:
                    self._on_unauthorized()
            raise normalize_error(response, f"Request failed with status code {response.status_code}")

        payload = _json_or_none(response)
        if isinstance(payload, dict) and "success" in payload:
            if not payload["success"]:
                raise normalize_error(response, None)
            return payload.get("data")
        return payload

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)
