"""Database operations for authentication.

Uses the non-RLS users table (see auth/schema.sql). It is read during login,
before any user context is established.
"""

from typing import Any
from uuid import UUID

import psycopg2.errors

from clients.postgres_client import PostgresClient
from auth.exceptions import DuplicateEmailError
from auth.types import Gender, Role, UserRecord

_USER_COLUMNS = "id, name, email, password_hash, role, gender, verification_document, created_at"


def _row_to_user(row: dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=UUID(row["id"]) if isinstance(row["id"], str) else row["id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        gender=Gender(row["gender"]) if row["gender"] else None,
        verification_document=row["verification_document"],
        created_at=row["created_at"],
    )


class AuthDatabase:
    """Postgres-backed UserStore."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Find user by email (case-insensitive)."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE lower(email) = lower(%s)",
            (email.strip(),),
        )
        return _row_to_user(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        """Find user by ID."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            (str(user_id),),
        )
        return _row_to_user(row) if row else None

    def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        gender: Gender | None = None,
        verification_document: str | None = None,
    ) -> UserRecord:
        """
        Insert a user with a lowercased email.

        Raises:
            DuplicateEmailError: unique index on lower(email) rejected the row.
        """
        try:
            rows = self._db.execute_returning(
                f"""INSERT INTO users (name, email, password_hash, role, gender, verification_document)
                    VALUES (%s, lower(%s), %s, %s, %s, %s)
                    RETURNING {_USER_COLUMNS}""",
                (
                    name,
                    email.strip(),
                    password_hash,
                    role.value,
                    gender.value if gender else None,
                    verification_document,
                ),
            )
        except psycopg2.errors.UniqueViolation:
            raise DuplicateEmailError()
        return _row_to_user(rows[0])

    def update_role(self, user_id: UUID, role: Role) -> UserRecord | None:
        """Change a user's role. None if the user doesn't exist."""
        rows = self._db.execute_returning(
            f"UPDATE users SET role = %s WHERE id = %s RETURNING {_USER_COLUMNS}",
            (role.value, str(user_id)),
        )
        return _row_to_user(rows[0]) if rows else None
