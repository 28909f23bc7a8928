"""
Translation of search/filter requests into backend predicates.

A ``FilterSpec`` is evaluated two ways: ``FilterSpec.matches()`` for
the in-memory store and ``to_mongo_query()`` for MongoDB. Both must
select exactly the same records:

* ``search_text``  - title OR author contains the text
* ``author_text``  - author contains the text
* ``edition_text`` - edition contains the text

Matching is a case-insensitive substring test and the present filters
are ANDed together. User text is always matched literally, never as a
regular expression. Text holding a NUL byte is rejected with
``ValidationError`` before either backend sees it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from .schemas import Book


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    # MongoDB refuses regular expressions holding a NUL byte.
    if "\x00" in value:
        raise ValidationError("Filter text must not contain NUL characters")
    return value


def _contains(haystack: str, needle: str) -> bool:
    return needle.casefold() in (haystack or "").casefold()


def _regex(needle: str) -> Dict[str, str]:
    return {"$regex": re.escape(needle), "$options": "i"}


@dataclass(frozen=True)
class FilterSpec:
    search_text: Optional[str] = None
    author_text: Optional[str] = None
    edition_text: Optional[str] = None

    def __post_init__(self):
        # Blank filters impose no constraint.
        object.__setattr__(self, "search_text", _clean(self.search_text))
        object.__setattr__(self, "author_text", _clean(self.author_text))
        object.__setattr__(self, "edition_text", _clean(self.edition_text))

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        author: Optional[str] = None,
        edition: Optional[str] = None,
    ) -> "FilterSpec":
        """Build a spec from the ``search``/``author``/``edition`` query parameters."""
        return cls(search_text=search, author_text=author, edition_text=edition)

    @property
    def is_empty(self) -> bool:
        return not (self.search_text or self.author_text or self.edition_text)

    def matches(self, book: Book) -> bool:
        if self.search_text and not (
            _contains(book.title, self.search_text)
            or _contains(book.author, self.search_text)
        ):
            return False
        if self.author_text and not _contains(book.author, self.author_text):
            return False
        if self.edition_text and not _contains(book.edition, self.edition_text):
            return False
        return True


def to_mongo_query(spec: FilterSpec) -> Dict[str, Any]:
    """Return the MongoDB ``find()`` filter equivalent to ``spec``.

    Each present dimension becomes one clause under ``$and`` so that the
    free-text ``$or`` and the ``author`` constraint never overwrite each
    other. An empty spec yields ``{}``.
    """
    if spec.is_empty:
        return {}
    clauses: List[Dict[str, Any]] = []
    if spec.search_text:
        clauses.append(
            {
                "$or": [
                    {"bname": _regex(spec.search_text)},
                    {"author": _regex(spec.search_text)},
                ]
            }
        )
    if spec.author_text:
        clauses.append({"author": _regex(spec.author_text)})
    if spec.edition_text:
        clauses.append({"bedition": _regex(spec.edition_text)})
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}
