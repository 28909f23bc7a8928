"""
Local disk storage for listing images.

Files are written under ``Settings.upload_dir`` with a generated name
(``<epoch-ms>-<8 hex><ext>``) and served read-only by the static mount
at ``/uploads``. The reference stored on a listing is the URL path,
e.g. ``/uploads/1718000000000-1a2b3c4d.jpg``.
"""

from __future__ import annotations

import logging
import re
import shutil
import time
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import PersistenceError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"

_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class ImageStore:
    def __init__(self, directory: Path, url_prefix: str = URL_PREFIX):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def new_name(self, filename: Optional[str]) -> str:
        """Generate a unique file name keeping the upload's extension."""
        ext = Path(filename or "").suffix.lower()
        if not _EXTENSION.match(ext):
            ext = ""
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"

    def url_for(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def save(self, name: str, source: BinaryIO) -> Path:
        path = self.path_for(name)
        try:
            with path.open("wb") as out:
                shutil.copyfileobj(source, out)
        except OSError as exc:
            logger.error("Could not write upload %s: %s", path, exc)
            path.unlink(missing_ok=True)
            raise PersistenceError("Could not store the uploaded image") from exc
        logger.info("Stored upload %s", path)
        return path

    def remove(self, name: str) -> None:
        """Delete a stored upload; a file that is already gone is ignored."""
        path = self.path_for(name)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Could not remove upload %s: %s", path, exc)
            return
        logger.warning("Removed orphaned upload %s", path)
