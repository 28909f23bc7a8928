"""
Route definitions for the listings API.

Endpoints under /api/books:
- GET    /api/books        : list listings, filtered by search/author/edition
- POST   /api/books        : create a listing (multipart form, optional image)
- DELETE /api/books/{id}   : delete a listing

Routes are plain ``def`` functions: FastAPI runs them in its thread
pool, which is what the blocking pymongo driver and the locked
in-memory store expect.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from ..errors import NotFoundError
from ..storage.base import BookBackend
from ..uploads import ImageStore
from .query import FilterSpec
from .schemas import Book, ErrorResponse, MessageResponse, parse_book_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


def get_backend(request: Request) -> BookBackend:
    return request.app.state.backend


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


@router.get("", response_model=List[Book])
def list_books(
    search: Optional[str] = Query(default=None, description="Text found in the title or author"),
    author: Optional[str] = Query(default=None, description="Text found in the author"),
    edition: Optional[str] = Query(default=None, description="Text found in the edition"),
    backend: BookBackend = Depends(get_backend),
) -> List[Book]:
    """Return matching listings, newest first."""
    return backend.list(FilterSpec.from_params(search, author, edition))


@router.post(
    "",
    response_model=Book,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
def create_book(
    bname: Optional[str] = Form(default=None),
    bedition: Optional[str] = Form(default=None),
    author: Optional[str] = Form(default=None),
    imgurl: Optional[str] = Form(default=None),
    contactno: Optional[str] = Form(default=None),
    contactemail: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    originalprice: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    backend: BookBackend = Depends(get_backend),
    images: ImageStore = Depends(get_image_store),
) -> Book:
    """Create a listing.

    Order of work: validate the fields, write the uploaded image, then
    persist the listing. If persisting fails the image is removed again
    so that no orphaned file is left behind.
    """
    raw = {
        "bname": bname,
        "bedition": bedition,
        "author": author,
        "imgurl": imgurl,
        "contactno": contactno,
        "contactemail": contactemail,
        "price": price,
        "originalprice": originalprice,
    }
    # Browsers send an empty file part when no image was chosen.
    upload_name = images.new_name(image.filename) if image and image.filename else None
    data = parse_book_input(
        {k: v for k, v in raw.items() if v is not None},
        image_ref=images.url_for(upload_name) if upload_name else None,
    )

    if upload_name:
        images.save(upload_name, image.file)
    try:
        book = backend.create(data)
    except Exception:
        if upload_name:
            images.remove(upload_name)
        raise
    logger.info("Created book %s (%s) in %s storage", book.id, book.title, backend.name)
    return book


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
def delete_book(book_id: str, backend: BookBackend = Depends(get_backend)) -> MessageResponse:
    if not backend.delete_by_id(book_id):
        raise NotFoundError("Book not found")
    logger.info("Deleted book %s from %s storage", book_id, backend.name)
    return MessageResponse(message="Book deleted successfully")
