"""
Abstract storage backend interface.

Every backend implements the same surface:

    list(spec)          -> list[Book]   newest first, [] when nothing matches
    create(data)        -> Book         id and created_at assigned here
    delete_by_id(id)    -> bool         False when no record matched
    close()             -> None         release connections

Backends own their records and never share state. Filtering semantics
live in ``catalog.query`` so that each backend only has to execute
them, not redefine them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List

from ..catalog.query import FilterSpec
from ..catalog.schemas import Book, BookCreate


def utcnow() -> datetime:
    """Current UTC time truncated to the millisecond.

    MongoDB stores dates with millisecond precision; truncating here
    keeps ``created_at`` identical whichever backend assigned it.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class BookBackend(ABC):
    """Storage for book listings."""

    #: Short label reported by the health check and in logs.
    name = "abstract"

    @abstractmethod
    def list(self, spec: FilterSpec) -> List[Book]:
        """Return every listing matching ``spec``, newest first.

        Ties on ``created_at`` come back in the same order on every call.
        Raises ``PersistenceError`` if the store cannot be read.
        """
        ...

    @abstractmethod
    def create(self, data: BookCreate) -> Book:
        """Assign an id and a creation time, store the listing and return it.

        Raises ``PersistenceError`` if the store cannot be written.
        """
        ...

    @abstractmethod
    def delete_by_id(self, book_id: str) -> bool:
        """Remove the listing with ``book_id``.

        Returns False, without raising, when no listing has that id.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the backend."""

    def __repr__(self):
        return f"<{self.__class__.__name__}>"
