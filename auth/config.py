"""Authentication configuration."""

from pathlib import Path

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in minutes. The signing secret comes from Vault
    (clients.vault_client.get_jwt_secret) and has no default.
    """

    # Bearer tokens
    jwt_secret: str = Field(
        ...,
        description="HMAC secret for signing bearer tokens",
        min_length=32,
    )
    jwt_algorithm: str = Field(
        default="HS256",
        pattern=r"^HS(256|384|512)$",
    )
    token_expiry_minutes: int = Field(
        default=60,
        description="Bearer token lifetime; no refresh, users sign in again",
        ge=5,
        le=1440,
    )

    # Password policy
    password_min_length: int = Field(default=8, ge=6, le=128)
    password_require_character_classes: bool = Field(
        default=True,
        description="Require upper, lower, digit and special (!@#$%^&*) characters",
    )
    bcrypt_rounds: int = Field(default=12, ge=4, le=15)

    # Rate limiting
    rate_limit_attempts: int = Field(
        default=5,
        description="Max login attempts per email per window",
        ge=1,
        le=20,
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        description="Rate limit window duration",
        ge=1,
        le=60,
    )

    # Verification documents
    upload_dir: Path = Field(default=Path("uploads"))
    max_document_bytes: int = Field(default=5 * 1024 * 1024, ge=1024)

    # Application
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    app_name: str = Field(default="RentWise")
