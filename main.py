"""FastAPI application entry point for the RentWise auth API."""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.base import success_response
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.documents import DocumentStorage
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenManager
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)


def build_auth_service(
    config: AuthConfig,
    user_store: UserStore,
    valkey: ValkeyClient,
    security_logger: SecurityLogger,
) -> tuple[AuthService, TokenManager, DocumentStorage]:
    """Wire AuthService and the collaborators the app factory also needs."""
    token_manager = TokenManager(valkey, config)
    documents = DocumentStorage(config.upload_dir, config.max_document_bytes)
    service = AuthService(
        config=config,
        user_store=user_store,
        token_manager=token_manager,
        rate_limiter=RateLimiter(valkey, config),
        security_logger=security_logger,
        document_storage=documents,
    )
    return service, token_manager, documents


def create_app(
    config: AuthConfig,
    auth_service: AuthService,
    token_manager: TokenManager,
    documents: DocumentStorage,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title=f"{config.app_name} API", version="0.1.0")

    # Last added runs first: CORS, then request ids, then auth
    app.add_middleware(AuthMiddleware, token_manager=token_manager)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(create_auth_router(auth_service), prefix="/api/auth")

    documents.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(documents.public_prefix, StaticFiles(directory=documents.upload_dir), name="uploads")

    @app.get("/health")
    async def health():
        return success_response({"status": "ok"})

    return app


def create_production_app() -> FastAPI:
    """Build the app against Postgres, Valkey and Vault secrets."""
    from clients.vault_client import get_database_url, get_jwt_secret, get_valkey_url

    config = AuthConfig(jwt_secret=get_jwt_secret())
    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    service, token_manager, documents = build_auth_service(
        config,
        user_store=AuthDatabase(postgres),
        valkey=valkey,
        security_logger=SecurityLogger(postgres),
    )
    logger.info("Auth API configured (token expiry %d min)", config.token_expiry_minutes)
    return create_app(config, service, token_manager, documents)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_production_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
    )
