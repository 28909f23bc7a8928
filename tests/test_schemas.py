import json
from datetime import datetime, timezone

import pytest

from college_books.catalog.schemas import Book, parse_book_input
from college_books.catalog.store import load_sample_books
from college_books.errors import ValidationError

from .conftest import book_fields


def test_parse_coerces_prices():
    book = parse_book_input(book_fields(price="45", originalprice="80.25"))
    assert book.price == 45.0
    assert book.original_price == 80.25


def test_parse_accepts_attribute_names():
    book = parse_book_input(
        {
            "title": "Linear Algebra",
            "edition": "4th",
            "author": "Gilbert Strang",
            "image_ref": "/uploads/x.jpg",
            "contact_phone": "555",
            "contact_email": "a@b.c",
            "price": 10,
            "original_price": 20,
        }
    )
    assert book.title == "Linear Algebra"
    assert book.image_ref == "/uploads/x.jpg"


def test_parse_strips_text_and_coerces_numbers_to_text():
    book = parse_book_input(book_fields(bname="  Calculus  ", contactno=5551234))
    assert book.title == "Calculus"
    assert book.contact_phone == "5551234"


def test_image_ref_overrides_submitted_url():
    book = parse_book_input(book_fields(), image_ref="/uploads/123-abc.png")
    assert book.image_ref == "/uploads/123-abc.png"


def test_unknown_keys_are_ignored():
    book = parse_book_input(book_fields(extra="x", _id="forged"))
    assert "extra" not in book.model_dump()


@pytest.mark.parametrize("missing", ["bname", "bedition", "author", "imgurl", "contactno", "contactemail", "price", "originalprice"])
def test_missing_field_is_rejected(missing):
    fields = book_fields()
    del fields[missing]
    with pytest.raises(ValidationError) as info:
        parse_book_input(fields)
    assert missing in info.value.message
    assert info.value.status_code == 400


@pytest.mark.parametrize(
    "field, value",
    [
        ("bname", "   "),
        ("price", "cheap"),
        ("price", ""),
        ("originalprice", "-1"),
        ("price", "nan"),
        ("price", "inf"),
    ],
)
def test_malformed_field_is_rejected(field, value):
    with pytest.raises(ValidationError) as info:
        parse_book_input(book_fields(**{field: value}))
    assert field in info.value.message


def test_all_problems_are_reported_together():
    with pytest.raises(ValidationError) as info:
        parse_book_input({"price": "x"})
    message = info.value.message
    for field in ("bname", "bedition", "author", "price", "originalprice"):
        assert field in message


def test_book_serializes_with_wire_names():
    book = Book(
        id="abc",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        **parse_book_input(book_fields()).model_dump(),
    )
    dumped = book.model_dump(by_alias=True)
    assert dumped["_id"] == "abc"
    assert dumped["bname"] == "Organic Chemistry"
    assert dumped["originalprice"] == 95.5
    assert "createdAt" in dumped


def test_naive_created_at_is_read_as_utc():
    doc = dict(book_fields(), _id="x", createdAt=datetime(2024, 1, 1, 8, 30))
    book = Book.model_validate(doc)
    assert book.created_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)


def test_sample_books_load_in_reverse_file_order():
    books = load_sample_books()
    assert [b.title for b in books] == [
        "Physics Fundamentals",
        "Advanced Mathematics",
        "Introduction to Computer Science",
    ]


def test_missing_sample_file_yields_nothing(tmp_path):
    assert load_sample_books(tmp_path / "absent.json") == []


def test_invalid_sample_entries_are_skipped(tmp_path):
    path = tmp_path / "books.json"
    path.write_text('[{"bname": "Only a title"}, %s]' % json.dumps(book_fields()))
    assert [b.title for b in load_sample_books(path)] == ["Organic Chemistry"]
