"""Configuration models and YAML loader for the random users client."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


def _default_headers() -> dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": "RandomUsersApp/1.0",
    }


class ApiConfig(BaseModel):
    """Remote user source endpoint."""

    base_url: str = "https://randomuser.me"
    path: str = "/api/"
    timeout_s: float = Field(default=30.0, gt=0)
    default_headers: dict[str, str] = Field(default_factory=_default_headers)

    @field_validator("base_url")
    @classmethod
    def base_url_is_http(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://, got '{v}'"
            raise ValueError(msg)
        return v


class ListingConfig(BaseModel):
    """Pagination behaviour of the listing engine."""

    page_size: int = Field(default=25, ge=1, le=5000)
    prefetch_threshold: int = Field(default=5, ge=0)
    keep_seed_on_refresh: bool = False


class BookmarksConfig(BaseModel):
    """Where bookmarks are persisted."""

    path: str = "data/bookmarks.db"
    slot: str = "BookmarkedUsers"

    @field_validator("slot")
    @classmethod
    def slot_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "slot must not be empty"
            raise ValueError(msg)
        return v.strip()


class ImageCacheConfig(BaseModel):
    """Bounds for the in-memory avatar cache."""

    count_limit: int = Field(default=100, ge=1)
    total_bytes_limit: int = Field(default=100 * 1024 * 1024, ge=1)
    timeout_s: float = Field(default=30.0, gt=0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    listing: ListingConfig = Field(default_factory=ListingConfig)
    bookmarks: BookmarksConfig = Field(default_factory=BookmarksConfig)
    images: ImageCacheConfig = Field(default_factory=ImageCacheConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
