from datetime import datetime, timedelta, timezone

import mongomock
import pytest

from college_books.catalog.schemas import parse_book_input
from college_books.storage import InMemoryBookBackend, MongoBookBackend

SEED = [
    ("Introduction to Computer Science", "5th Edition", "John Smith"),
    ("Advanced Mathematics", "3rd Edition", "Jane Doe"),
    ("Physics Fundamentals", "2nd Edition", "Robert Johnson"),
]


def book_fields(**overrides):
    fields = {
        "bname": "Organic Chemistry",
        "bedition": "8th Edition",
        "author": "Paula Bruice",
        "imgurl": "https://example.com/cover.jpg",
        "contactno": "+1234567899",
        "contactemail": "seller@example.com",
        "price": "30",
        "originalprice": "95.5",
    }
    fields.update(overrides)
    return fields


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self):
        self.now = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def make_book():
    def _make(title="Organic Chemistry", edition="8th Edition", author="Paula Bruice", **overrides):
        return parse_book_input(book_fields(bname=title, bedition=edition, author=author, **overrides))

    return _make


@pytest.fixture
def mongo_collection():
    return mongomock.MongoClient()["college-books"]["books"]


@pytest.fixture(params=["memory", "mongodb"])
def backend(request, mongo_collection):
    """Each backend in turn, so that every test checks both behave the same."""
    if request.param == "memory":
        b = InMemoryBookBackend()
    else:
        b = MongoBookBackend(mongo_collection)
    yield b
    b.close()


@pytest.fixture(params=["memory", "mongodb"])
def ticking_backend(request, mongo_collection):
    clock = TickingClock()
    if request.param == "memory":
        b = InMemoryBookBackend(clock=clock)
    else:
        b = MongoBookBackend(mongo_collection, clock=clock)
    yield b
    b.close()


@pytest.fixture
def seeded(backend, make_book):
    """The three sample listings, created in order (Physics is newest)."""
    created = [backend.create(make_book(title, edition, author)) for title, edition, author in SEED]
    return backend, created
