"""
Configuration helpers for the REST API.

Settings are read from environment variables once and cached, so that
routers/services/db helpers never fetch os.environ directly.
"""

from dataclasses import dataclass, field
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    mongo_uri: str
    mongo_db_name: str
    mongo_collection: str
    mongo_timeout_ms: int
    host: str
    port: int
    log_level: str
    cors_origins: tuple[str, ...] = field(default_factory=tuple)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _csv(value: str | None) -> tuple[str, ...]:
        return tuple(x.strip() for x in (value or "").split(",") if x.strip())

    return Settings(
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017").strip(),
        mongo_db_name=os.getenv("MONGO_DB_NAME", "restapi").strip() or "restapi",
        mongo_collection=os.getenv("MONGO_COLLECTION", "users").strip() or "users",
        mongo_timeout_ms=_int(os.getenv("MONGO_TIMEOUT_MS", "5000"), 5000),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int(os.getenv("PORT", "3000"), 3000),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=_csv(os.getenv("CORS_ORIGINS")),
    )
