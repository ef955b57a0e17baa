"""Pydantic models for auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class Role(str, Enum):
    """Portal role. Exactly one per user."""

    ADMIN = "ADMIN"
    OWNER = "OWNER"
    TENANT = "TENANT"


# Roles a visitor may pick when signing up; admins are provisioned out-of-band
SELF_SERVICE_ROLES = frozenset({Role.OWNER, Role.TENANT})


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class UserRecord(BaseModel):
    """A stored user row, including the password hash. Never leaves the server."""

    id: UUID
    name: str
    email: EmailStr
    password_hash: str
    role: Role
    gender: Gender | None = None
    verification_document: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

    def to_profile(self) -> "UserProfile":
        return UserProfile(id=self.id, name=self.name, email=self.email, role=self.role)


class UserProfile(BaseModel):
    """User projection returned to clients and held in the portal session."""

    id: UUID
    name: str
    email: EmailStr
    role: Role

    model_config = {"frozen": True}


class RegisterRequest(BaseModel):
    """Registration payload. Role policy is applied by AuthService, not here."""

    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    role: Role
    gender: Gender | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenClaims(BaseModel):
    """Verified claims carried by a bearer token."""

    sub: UUID = Field(..., description="User id")
    role: Role
    jti: str = Field(..., description="Unique token id, the revocation handle")
    iat: datetime
    exp: datetime

    @property
    def user_id(self) -> UUID:
        return self.sub


class AuthResult(BaseModel):
    """Returned by register and login: the {token, user} pair."""

    user: UserProfile
    token: str
