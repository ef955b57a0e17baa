"""Tests for application wiring in main.py."""

from unittest.mock import Mock, patch

from fastapi.testclient import TestClient

from auth.database import AuthDatabase
from auth.security_logger import SecurityLogger
from auth.service import AuthService
from auth.store import InMemoryUserStore
from main import build_auth_service, create_app, create_production_app


def test_build_auth_service(config, valkey):
    service, token_manager, documents = build_auth_service(
        config,
        user_store=InMemoryUserStore(),
        valkey=valkey,
        security_logger=Mock(spec=SecurityLogger),
    )

    assert isinstance(service, AuthService)
    assert documents.upload_dir == config.upload_dir

    app = create_app(config, service, token_manager, documents)
    assert TestClient(app).get("/health").status_code == 200


def test_production_app_reads_secrets_from_vault():
    with patch("clients.vault_client.get_jwt_secret", return_value="v" * 40), patch(
        "clients.vault_client.get_database_url", return_value="postgresql://db"
    ), patch("clients.vault_client.get_valkey_url", return_value="redis://cache"), patch(
        "main.PostgresClient"
    ) as postgres_cls, patch("main.ValkeyClient") as valkey_cls, patch(
        "main.create_app"
    ) as create_app_mock:
        create_production_app()

    postgres_cls.assert_called_once_with("postgresql://db")
    valkey_cls.assert_called_once_with("redis://cache")
    config, service = create_app_mock.call_args.args[:2]
    assert config.jwt_secret == "v" * 40
    assert isinstance(service._users, AuthDatabase)
