"""
MongoDB storage backend.

Documents use the original collection layout (``bname``, ``bedition``,
``imgurl``, ``contactno``, ``contactemail``, ``price``,
``originalprice``, ``createdAt``) so that an existing database keeps
working. Filters are translated by ``catalog.query.to_mongo_query`` and
results are sorted by ``createdAt`` then ``_id``, both descending.

Every driver failure is logged and re-raised as ``PersistenceError``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import pydantic
from bson import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import OperationFailure, PyMongoError

from ..catalog.query import FilterSpec, to_mongo_query
from ..catalog.schemas import Book, BookCreate
from ..config import Settings
from ..errors import PersistenceError
from .base import BookBackend, utcnow

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


class MongoBookBackend(BookBackend):
    """Listings stored in one MongoDB collection.

    Usage:
        backend = MongoBookBackend.connect(Settings.from_env())
        backend.create(parse_book_input(form))
    """

    name = "mongodb"

    def __init__(
        self,
        collection: Collection,
        client: Optional[MongoClient] = None,
        clock: Callable = utcnow,
    ):
        self._collection = collection
        self._client = client
        self._clock = clock

    @classmethod
    def connect(
        cls,
        settings: Settings,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ) -> "MongoBookBackend":
        """Open a client, ping the server and return a ready backend.

        All driver timeouts are set to ``settings.mongodb_timeout_ms``, so
        neither this call nor any later query can block indefinitely.

        Raises:
            PyMongoError: the URI is invalid or the server is unreachable.
        """
        timeout = settings.mongodb_timeout_ms
        client = client_factory(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=timeout,
            connectTimeoutMS=timeout,
            socketTimeoutMS=timeout,
            tz_aware=True,
        )
        collection = client[settings.mongodb_database][settings.mongodb_collection]
        backend = cls(collection, client=client)
        try:
            backend.ping()
            backend.ensure_indexes()
        except PyMongoError:
            client.close()
            raise
        return backend

    def ensure_indexes(self) -> None:
        """Create the listing-order index, tolerating a missing privilege.

        A user without index rights can still read and write books, so a
        refusal here is logged and the backend stays in use.
        """
        try:
            self._collection.create_index(NEWEST_FIRST)
        except OperationFailure as exc:
            logger.warning("Could not create the createdAt index: %s", exc)

    def ping(self) -> None:
        self._collection.database.client.admin.command("ping")

    # ── Conversion ────────────────────────────────────────────

    def _to_document(self, data: BookCreate) -> Dict[str, Any]:
        doc = data.model_dump(by_alias=True)
        doc["createdAt"] = self._clock()
        return doc

    @staticmethod
    def _to_book(doc: Dict[str, Any]) -> Book:
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        try:
            return Book.model_validate(doc)
        except pydantic.ValidationError as exc:
            logger.error("Malformed book document %s: %s", doc["_id"], exc)
            raise PersistenceError(f"Stored book {doc['_id']} is malformed") from exc

    # ── Operations ────────────────────────────────────────────

    def list(self, spec: FilterSpec) -> List[Book]:
        query = to_mongo_query(spec)
        try:
            docs = list(self._collection.find(query).sort(NEWEST_FIRST))
        except PyMongoError as exc:
            logger.error("MongoDB find %s failed: %s", query, exc)
            raise PersistenceError("Could not read books from the database") from exc
        return [self._to_book(doc) for doc in docs]

    def create(self, data: BookCreate) -> Book:
        doc = self._to_document(data)
        try:
            result = self._collection.insert_one(doc)
        except PyMongoError as exc:
            logger.error("MongoDB insert failed: %s", exc)
            raise PersistenceError("Could not save the book to the database") from exc
        doc["_id"] = result.inserted_id
        return self._to_book(doc)

    def delete_by_id(self, book_id: str) -> bool:
        if not ObjectId.is_valid(book_id):
            return False
        try:
            result = self._collection.delete_one({"_id": ObjectId(book_id)})
        except PyMongoError as exc:
            logger.error("MongoDB delete of %s failed: %s", book_id, exc)
            raise PersistenceError("Could not delete the book from the database") from exc
        return result.deleted_count == 1

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
