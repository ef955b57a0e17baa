"""Storage for identity verification documents uploaded at registration."""

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path, PurePath

from auth.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".pdf", ".png", ".jpg", ".jpeg"})


@dataclass(frozen=True)
class DocumentUpload:
    """A file received with a registration form."""

    filename: str
    content: bytes


class DocumentStorage:
    """
    Saves uploads under random names in a local directory.

    The directory is served read-only at public_prefix (see main.create_app),
    so the returned reference is directly fetchable.
    """

    def __init__(self, upload_dir: Path, max_bytes: int, public_prefix: str = "/uploads"):
        self._upload_dir = Path(upload_dir)
        self._max_bytes = max_bytes
        self._public_prefix = public_prefix.rstrip("/")

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    @property
    def public_prefix(self) -> str:
        return self._public_prefix

    def validate(self, filename: str, content: bytes) -> str:
        """
        Check an upload and return its normalized extension.

        Raises:
            ValidationError: empty, oversized, or not an accepted file type.
        """
        extension = PurePath(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"Verification document must be one of: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        if not content:
            raise ValidationError("Verification document is empty")
        if len(content) > self._max_bytes:
            raise ValidationError(
                f"Verification document exceeds {self._max_bytes // 1024} KiB"
            )
        return extension

    def save(self, filename: str, content: bytes) -> str:
        """Store the upload and return its public reference."""
        extension = self.validate(filename, content)
        stored_name = f"{secrets.token_hex(16)}{extension}"

        self._upload_dir.mkdir(parents=True, exist_ok=True)
        (self._upload_dir / stored_name).write_bytes(content)
        logger.info("Stored verification document %s (%d bytes)", stored_name, len(content))

        return f"{self._public_prefix}/{stored_name}"

    def discard(self, reference: str) -> None:
        """Delete a stored upload by public reference. Missing files are ignored."""
        name = PurePath(reference).name
        (self._upload_dir / name).unlink(missing_ok=True)
