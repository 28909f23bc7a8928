"""
Runtime settings.

All values come from the process environment with defaults suitable
for local development. ``Settings.from_env()`` is called once by the
application factory; tests build ``Settings`` directly.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel

DEFAULT_MONGODB_URI = "mongodb://localhost:27017/college-books"
DEFAULT_DATABASE = "college-books"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _database_from_uri(uri: str) -> Optional[str]:
    """Return the database named in a MongoDB URI path, if any."""
    if "://" not in uri:
        return None
    path = urlsplit(uri).path.lstrip("/")
    return unquote(path) or None


class Settings(BaseModel):
    mongodb_uri: str = DEFAULT_MONGODB_URI
    mongodb_database: str = DEFAULT_DATABASE
    mongodb_collection: str = "books"
    # Bounds server selection, connect and every socket read.
    mongodb_timeout_ms: int = 5000
    host: str = "0.0.0.0"
    port: int = 5000
    upload_dir: Path = Path("uploads")
    seed_sample_books: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        uri = env.get("MONGODB_URI") or DEFAULT_MONGODB_URI
        database = (
            env.get("MONGODB_DATABASE")
            or _database_from_uri(uri)
            or DEFAULT_DATABASE
        )
        return cls(
            mongodb_uri=uri,
            mongodb_database=database,
            mongodb_collection=env.get("MONGODB_COLLECTION") or "books",
            mongodb_timeout_ms=_parse_int(
                "MONGODB_TIMEOUT_MS", env.get("MONGODB_TIMEOUT_MS", "5000")
            ),
            host=env.get("HOST") or "0.0.0.0",
            port=_parse_int("PORT", env.get("PORT", "5000")),
            upload_dir=Path(env.get("UPLOAD_DIR") or "uploads"),
            seed_sample_books=_parse_bool(
                "SEED_SAMPLE_BOOKS", env.get("SEED_SAMPLE_BOOKS", "true")
            ),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
