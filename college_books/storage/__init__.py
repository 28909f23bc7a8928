"""
Storage backends for book listings.

    - memory.py   — in-process deque, used when MongoDB is unreachable
    - mongo.py    — MongoDB collection via pymongo
    - selector.py — picks one of the two at startup, once

Both backends implement ``base.BookBackend`` and must return the same
listings, in the same order, for the same ``FilterSpec``.
"""

from .base import BookBackend
from .memory import InMemoryBookBackend
from .mongo import MongoBookBackend
from .selector import BackendSelector, ConnectionState

__all__ = [
    "BookBackend",
    "InMemoryBookBackend",
    "MongoBookBackend",
    "BackendSelector",
    "ConnectionState",
]
