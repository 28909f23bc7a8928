"""
Sample listings for the in-memory fallback store.

When MongoDB is unreachable the service starts on an empty in-memory
store; seeding it with a few listings from ``data/sample_books.json``
gives the front-end something to render. Seeding is controlled by the
``SEED_SAMPLE_BOOKS`` setting.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import ValidationError
from .schemas import BookCreate, parse_book_input

logger = logging.getLogger(__name__)

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "sample_books.json"


def load_sample_books(path: Optional[Path] = None) -> List[BookCreate]:
    """Load the sample listings, ready to be passed to a backend as seed.

    Parameters
    ----------
    path : Optional[Path]
        JSON file holding a list of listings keyed by wire name.
        Defaults to the packaged ``data/sample_books.json``.

    Returns
    -------
    List[BookCreate]
        The listings in reverse file order: a backend inserting them one
        by one then lists them in file order, newest first. Entries that
        fail validation are logged and skipped; a missing or unreadable
        file yields an empty list.
    """
    source = path or DATA_FILE
    try:
        with source.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not load sample books from %s: %s", source, exc)
        return []

    books: List[BookCreate] = []
    for index, entry in enumerate(raw if isinstance(raw, list) else []):
        try:
            books.append(parse_book_input(entry))
        except ValidationError as exc:
            logger.warning("Skipping sample book #%d: %s", index, exc.message)
    books.reverse()
    return books
