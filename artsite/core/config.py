"""
Configuration helpers for the artist site.

Routers/services should call get_settings() instead of reading os.environ
directly, so tests can swap values with monkeypatch + cache_clear().
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[1] / "data.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    site_name: str
    site_tagline: str
    contact_email: str
    storage_backend: str
    data_file: str
    database_url: str
    max_upload_bytes: int
    embed_max_px: int
    storage_quota_bytes: int
    visitor_cookie_ttl_seconds: int
    view_state_limit: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    backend = (os.getenv("STORAGE_BACKEND") or "json").strip().lower()
    if backend not in {"memory", "json", "sql"}:
        backend = "json"

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        site_name=os.getenv("SITE_NAME", "ChaoticColors"),
        site_tagline=os.getenv("SITE_TAGLINE", "by ChaoticColorDesigns"),
        contact_email=os.getenv("CONTACT_EMAIL", "hello@chaoticcolors.art"),
        storage_backend=backend,
        data_file=os.getenv("DATA_FILE", str(DEFAULT_DATA_FILE)),
        database_url=os.getenv("DATABASE_URL", ""),
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(8 * 1024 * 1024)), 8 * 1024 * 1024),
        embed_max_px=_int(os.getenv("EMBED_MAX_PX", "1600"), 1600),
        storage_quota_bytes=_int(os.getenv("STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024)), 5 * 1024 * 1024),
        visitor_cookie_ttl_seconds=_int(
            os.getenv("VISITOR_COOKIE_TTL_SECONDS", str(365 * 24 * 60 * 60)), 365 * 24 * 60 * 60
        ),
        view_state_limit=_int(os.getenv("VIEW_STATE_LIMIT", "1024"), 1024),
    )
