"""Password hashing (bcrypt) and the server-side strength policy."""

import re

import bcrypt

from auth.config import AuthConfig
from auth.exceptions import WeakPasswordError

SPECIAL_CHARACTERS = "!@#$%^&*"

_CHARACTER_CLASSES = [
    (re.compile(r"[A-Z]"), "contain an uppercase letter"),
    (re.compile(r"[a-z]"), "contain a lowercase letter"),
    (re.compile(r"[0-9]"), "contain a digit"),
    (re.compile(f"[{re.escape(SPECIAL_CHARACTERS)}]"), f"contain one of {SPECIAL_CHARACTERS}"),
]

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt with a fresh salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. A malformed hash is a mismatch."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
            password_hash.encode("utf-8"),
        )
    except ValueError:
        return False


def password_problems(password: str, config: AuthConfig) -> list[str]:
    """List every rule the password breaks (empty if acceptable)."""
    problems = []
    if len(password) < config.password_min_length:
        problems.append(f"be at least {config.password_min_length} characters")
    if config.password_require_character_classes:
        problems.extend(msg for pattern, msg in _CHARACTER_CLASSES if not pattern.search(password))
    return problems


def check_password_policy(password: str, config: AuthConfig) -> None:
    """
    Enforce the password policy.

    Raises:
        WeakPasswordError: listing all unmet rules.
    """
    problems = password_problems(password, config)
    if problems:
        raise WeakPasswordError(problems)
