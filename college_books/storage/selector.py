"""
Startup choice between MongoDB and the in-memory fallback.

The selector makes exactly one connection attempt. If it succeeds the
process uses MongoDB for its whole lifetime; if it fails the failure is
logged and the process runs on the in-memory store until it exits.
There is no reconnection: listings written during fallback would not be
visible once MongoDB came back, so switching mid-process is not done.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from ..catalog.store import load_sample_books
from ..config import Settings
from .base import BookBackend
from .memory import InMemoryBookBackend
from .mongo import MongoBookBackend

logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class BackendSelector:
    """Resolves the process-wide ``BookBackend`` once.

    Usage:
        selector = BackendSelector(Settings.from_env())
        backend = selector.select()     # same object on every call
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ):
        self._settings = settings
        self._client_factory = client_factory
        self._state = ConnectionState.DISCONNECTED
        self._backend: Optional[BookBackend] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    def select(self) -> BookBackend:
        with self._lock:
            if self._backend is None:
                self._backend = self._resolve()
            return self._backend

    def _resolve(self) -> BookBackend:
        settings = self._settings
        try:
            backend = MongoBookBackend.connect(settings, client_factory=self._client_factory)
        except PyMongoError as exc:
            logger.warning("MongoDB not available, using in-memory storage: %s", exc)
            logger.warning("Data will not persist between server restarts.")
            seed = load_sample_books() if settings.seed_sample_books else []
            return InMemoryBookBackend(seed=seed)
        self._state = ConnectionState.CONNECTED
        logger.info(
            "Connected to MongoDB database %r, collection %r",
            settings.mongodb_database,
            settings.mongodb_collection,
        )
        return backend
