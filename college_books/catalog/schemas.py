"""
Pydantic schema definitions for the catalog module.

``BookCreate`` holds what a seller submits; ``Book`` adds the fields the
storage backend assigns (``id`` and ``created_at``). Attribute names are
Pythonic, while the aliases keep the JSON keys used by the existing
front-end and by documents already stored in MongoDB (``bname``,
``bedition``, ``imgurl`` ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ValidationError

# Attribute name -> wire name, in form order.
WIRE_NAMES: Dict[str, str] = {
    "title": "bname",
    "edition": "bedition",
    "author": "author",
    "image_ref": "imgurl",
    "contact_phone": "contactno",
    "contact_email": "contactemail",
    "price": "price",
    "original_price": "originalprice",
}


class BookCreate(BaseModel):
    """A listing as submitted by a seller.

    Every text field is required and must not be blank once surrounding
    whitespace is stripped. ``price`` and ``original_price`` accept
    anything pydantic can coerce to a float (form fields arrive as
    strings) and must be finite and non-negative.
    """

    model_config = ConfigDict(
        populate_by_name=True, str_strip_whitespace=True, coerce_numbers_to_str=True
    )

    title: str = Field(alias="bname", min_length=1)
    edition: str = Field(alias="bedition", min_length=1)
    author: str = Field(alias="author", min_length=1)
    image_ref: str = Field(alias="imgurl", min_length=1)
    contact_phone: str = Field(alias="contactno", min_length=1)
    contact_email: str = Field(alias="contactemail", min_length=1)
    price: float = Field(ge=0, allow_inf_nan=False)
    original_price: float = Field(alias="originalprice", ge=0, allow_inf_nan=False)


class Book(BookCreate):
    """A stored listing. Instances are immutable."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(alias="_id")
    created_at: datetime = Field(alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # MongoDB hands back naive datetimes unless the client is tz-aware.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


def describe_errors(errors: list) -> str:
    parts = []
    for err in errors:
        field = ".".join(str(p) for p in err.get("loc", ())) or "input"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_book_input(raw: Mapping[str, Any], image_ref: Optional[str] = None) -> BookCreate:
    """Coerce a loosely typed mapping into a ``BookCreate``.

    Parameters
    ----------
    raw : Mapping[str, Any]
        Submitted fields, keyed by wire name (``bname``) or attribute
        name (``title``). Unknown keys are ignored.
    image_ref : Optional[str]
        Reference of an uploaded image. When given it replaces any
        ``imgurl`` value in ``raw``.

    Returns
    -------
    BookCreate
        The validated listing.

    Raises
    ------
    ValidationError
        When a required field is missing or blank, or a price cannot be
        coerced to a non-negative number. The message names every
        offending field.
    """
    data: Dict[str, Any] = {}
    for attr, wire in WIRE_NAMES.items():
        if wire in raw:
            data[wire] = raw[wire]
        elif attr in raw:
            data[wire] = raw[attr]
    if image_ref is not None:
        data["imgurl"] = image_ref
    try:
        return BookCreate.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(describe_errors(exc.errors())) from None
