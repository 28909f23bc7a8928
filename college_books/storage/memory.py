"""
In-process fallback store.

Used when MongoDB cannot be reached at startup. Records live in a deque
owned by the backend instance, newest at the front, and are lost when
the process exits. FastAPI runs synchronous routes in a thread pool, so
every operation holds the instance lock for its full duration.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from operator import attrgetter
from typing import Callable, Deque, Iterable, List

from ..catalog.query import FilterSpec
from ..catalog.schemas import Book, BookCreate
from .base import BookBackend, utcnow

logger = logging.getLogger(__name__)


class InMemoryBookBackend(BookBackend):
    """Listings kept in a locked deque.

    Usage:
        backend = InMemoryBookBackend(seed=load_sample_books())
        backend.list(FilterSpec(author_text="doe"))
    """

    name = "memory"

    def __init__(
        self,
        seed: Iterable[BookCreate] = (),
        clock: Callable = utcnow,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._books: Deque[Book] = deque()
        self._lock = threading.Lock()
        self._clock = clock
        self._new_id = id_factory
        for data in seed:
            self.create(data)

    def list(self, spec: FilterSpec) -> List[Book]:
        with self._lock:
            matched = [book for book in self._books if spec.matches(book)]
        # Stable: equal timestamps keep deque order, i.e. newest insert first.
        matched.sort(key=attrgetter("created_at"), reverse=True)
        return matched

    def create(self, data: BookCreate) -> Book:
        with self._lock:
            book = Book(
                id=self._new_id(),
                created_at=self._clock(),
                **data.model_dump(),
            )
            self._books.appendleft(book)
        logger.debug("Stored book %s in memory (%d total)", book.id, len(self._books))
        return book

    def delete_by_id(self, book_id: str) -> bool:
        with self._lock:
            for index, book in enumerate(self._books):
                if book.id == book_id:
                    del self._books[index]
                    return True
        return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)
