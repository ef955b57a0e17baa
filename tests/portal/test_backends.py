"""Tests for the AuthBackend implementations and backend selection."""

import json
from unittest.mock import Mock
from uuid import uuid4

import pytest
import responses

from auth.documents import DocumentUpload
from auth.exceptions import AuthenticationError
from auth.types import RegisterRequest, Role
from portal.backends import HttpAuthBackend, InMemoryAuthBackend, create_backend
from portal.config import PortalConfig
from portal.gateway import ApiError, RequestGateway

BASE = "http://api.test/api"
PASSWORD = "Str0ng!Pass"


def _user_json(role: str = "OWNER") -> dict:
    return {"id": str(uuid4()), "name": "Olive", "email": "olive@example.com", "role": role}


def _envelope(data) -> dict:
    return {"success": True, "data": data, "error": None}


@pytest.fixture
def http_backend():
    return HttpAuthBackend(RequestGateway(BASE))


@pytest.fixture
def registration():
    return RegisterRequest(name="Olive", email="olive@example.com", password=PASSWORD, role=Role.OWNER)


class TestHttpAuthBackend:
    @responses.activate
    def test_login(self, http_backend):
        user = _user_json()
        responses.post(f"{BASE}/auth/login", json=_envelope({"token": "tok", "user": user}))

        result = http_backend.login("olive@example.com", PASSWORD)

        assert result.token == "tok"
        assert result.user.role == Role.OWNER
        assert json.loads(responses.calls[0].request.body) == {
            "email": "olive@example.com",
            "password": PASSWORD,
        }

    @responses.activate
    def test_register_json(self, http_backend, registration):
        responses.post(f"{BASE}/auth/register", json=_envelope({"token": "tok", "user": _user_json()}))

        http_backend.register(registration)

        sent = json.loads(responses.calls[0].request.body)
        assert sent == {
            "name": "Olive",
            "email": "olive@example.com",
            "password": PASSWORD,
            "role": "OWNER",
        }

    @responses.activate
    def test_register_multipart_with_document(self, http_backend, registration):
        responses.post(f"{BASE}/auth/register", json=_envelope({"token": "tok", "user": _user_json()}))

        http_backend.register(registration, DocumentUpload("deed.pdf", b"%PDF"))

        request = responses.calls[0].request
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="verificationDocument"; filename="deed.pdf"' in request.body
        assert b'name="role"' in request.body

    @responses.activate
    def test_fetch_current_user_sends_given_token(self, http_backend):
        user = _user_json("TENANT")
        responses.get(f"{BASE}/auth/me", json=_envelope({"user": user}))

        profile = http_backend.fetch_current_user("tok-9")

        assert profile.role == Role.TENANT
        assert responses.calls[0].request.headers["Authorization"] == "Bearer tok-9"

    @responses.activate
    def test_logout(self, http_backend):
        responses.post(f"{BASE}/auth/logout", json=_envelope({"message": "Logged out successfully"}))

        http_backend.logout("tok-9")

        assert responses.calls[0].request.headers["Authorization"] == "Bearer tok-9"

    @responses.activate
    def test_failed_login_raises_api_error(self, http_backend):
        responses.post(
            f"{BASE}/auth/login",
            json={"success": False, "error": {"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"}},
            status=401,
        )

        with pytest.raises(ApiError) as exc_info:
            http_backend.login("olive@example.com", "nope")

        assert exc_info.value.code == "INVALID_CREDENTIALS"

    @responses.activate
    @pytest.mark.parametrize("data", [None, {}, {"token": "tok"}])
    def test_malformed_login_payload_raises_api_error(self, http_backend, data):
        responses.post(f"{BASE}/auth/login", json=_envelope(data))

        with pytest.raises(ApiError) as exc_info:
            http_backend.login("olive@example.com", PASSWORD)

        assert exc_info.value.code == "INVALID_RESPONSE"

    @responses.activate
    @pytest.mark.parametrize("data", [None, {}, {"user": None}, "unexpected"])
    def test_malformed_me_payload_raises_api_error(self, http_backend, data):
        responses.get(f"{BASE}/auth/me", json=_envelope(data))

        with pytest.raises(ApiError) as exc_info:
            http_backend.fetch_current_user("tok")

        assert exc_info.value.code == "INVALID_RESPONSE"


class TestInMemoryAuthBackend:
    def test_round_trip(self, auth_service, make_registration):
        backend = InMemoryAuthBackend(auth_service)

        registered = backend.register(make_registration())
        logged_in = backend.login("tenant@example.com", PASSWORD)

        assert backend.fetch_current_user(logged_in.token) == registered.user
        backend.logout(logged_in.token)

    def test_errors_pass_through(self, auth_service):
        with pytest.raises(AuthenticationError):
            InMemoryAuthBackend(auth_service).login("nobody@example.com", PASSWORD)


class TestCreateBackend:
    def test_http_default(self):
        assert isinstance(create_backend(PortalConfig()), HttpAuthBackend)

    def test_memory(self, auth_service):
        backend = create_backend(PortalConfig(backend="memory"), service=auth_service)

        assert isinstance(backend, InMemoryAuthBackend)

    def test_memory_requires_service(self):
        with pytest.raises(ValueError):
            create_backend(PortalConfig(backend="memory"))

    def test_uses_given_gateway(self):
        gateway = Mock(spec=RequestGateway)
        gateway.post.return_value = {"token": "t", "user": _user_json()}

        create_backend(PortalConfig(), gateway=gateway).login("olive@example.com", PASSWORD)

        gateway.post.assert_called_once()
