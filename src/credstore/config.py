"""Session settings."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .store import DEFAULT_PERMISSIONS


class StoreSettings(BaseModel):
    """Settings for one interactive session."""

    default_permissions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PERMISSIONS)
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: Optional[Path] = None
    list_format: Literal["table", "chain"] = "table"

    @field_validator("default_permissions")
    @classmethod
    def _non_empty_permissions(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value if item.strip()]
        if not cleaned:
            raise ValueError("at least one default permission is required")
        return cleaned
