"""Portal (client-side) configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class PortalConfig(BaseModel):
    """
    Portal configuration.

    The backend is chosen once at startup; nothing downstream branches on it.
    """

    api_base_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the auth API, including the /api prefix",
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        description="Hard cap on every outbound request",
        gt=0,
        le=120,
    )
    storage_path: Path | None = Field(
        default=None,
        description="File for the persisted session; None keeps it in memory",
    )
    backend: Literal["http", "memory"] = Field(default="http")

    @classmethod
    def from_env(cls) -> "PortalConfig":
        """Build from RENTWISE_* environment variables, defaults otherwise."""
        values: dict = {}
        if os.getenv("RENTWISE_API_URL"):
            values["api_base_url"] = os.environ["RENTWISE_API_URL"]
        if os.getenv("RENTWISE_BACKEND"):
            values["backend"] = os.environ["RENTWISE_BACKEND"]
        if os.getenv("RENTWISE_STORAGE_PATH"):
            values["storage_path"] = Path(os.environ["RENTWISE_STORAGE_PATH"])
        return cls(**values)
