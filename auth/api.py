"""HTTP routes for authentication."""

import ipaddress
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from api.base import success_response
from auth.documents import DocumentUpload
from auth.exceptions import ValidationError
from auth.security_middleware import bearer_token, current_claims
from auth.service import AuthService
from auth.types import LoginRequest, RegisterRequest, TokenClaims

logger = logging.getLogger(__name__)

DOCUMENT_FIELD = "verificationDocument"


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _describe(error: PydanticValidationError) -> str:
    """Flatten pydantic errors into one user-facing sentence."""
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "body"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


async def _read_registration(
    request: Request, max_document_bytes: int
) -> tuple[dict[str, Any], DocumentUpload | None]:
    """Accept registration as JSON, or as a multipart form carrying a document.

    Uploads are read up to one byte past the limit, enough for size
    validation to reject them.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get(DOCUMENT_FIELD)
        document = None
        if isinstance(upload, UploadFile) and upload.filename:
            content = await upload.read(max_document_bytes + 1)
            document = DocumentUpload(filename=upload.filename, content=content)
        fields = {
            key: value
            for key, value in form.items()
            if isinstance(value, str) and value != ""
        }
        return fields, document

    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("Request body must be JSON or multipart form data")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload, None


def create_auth_router(auth_service: AuthService) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])

    @router.post("/register")
    async def register(request: Request):
        """Create an OWNER or TENANT account.

        Returns {token, user}. Fails with 400 on duplicate email, ADMIN role,
        weak password, or a rejected verification document.
        """
        payload, document = await _read_registration(request, auth_service.max_document_bytes)
        try:
            body = RegisterRequest.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(_describe(e))

        result = await run_in_threadpool(
            auth_service.register,
            body,
            ip_address=_get_client_ip(request),
            document=document,
        )
        return success_response(result.model_dump(mode="json"), _request_id(request))

    @router.post("/login")
    def login(request: Request, body: LoginRequest):
        """Exchange email and password for {token, user}.

        401 with an identical body whether the email is unknown or the
        password is wrong.
        """
        result = auth_service.login(
            email=body.email,
            password=body.password,
            ip_address=_get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return success_response(result.model_dump(mode="json"), _request_id(request))

    @router.post("/logout")
    def logout(request: Request):
        """Revoke the presented bearer token. Always succeeds."""
        token = bearer_token(request)
        if token:
            auth_service.logout(token, ip_address=_get_client_ip(request))
        return success_response({"message": "Logged out successfully"}, _request_id(request))

    @router.get("/me")
    def get_current_user(request: Request, claims: TokenClaims = Depends(current_claims)):
        """Get the user behind the bearer token (requires AuthMiddleware)."""
        user = auth_service.profile_for(claims)
        return success_response({"user": user.model_dump(mode="json")}, _request_id(request))

    @router.get("/test")
    async def connection_test(request: Request):
        """Connectivity probe for the portal."""
        return success_response({"message": "API connected successfully"}, _request_id(request))

    return router
