"""
Books Router

CRUD endpoints for books.

Demonstrates:
- Rule-table validation before any write
- Bearer token protection of mutating endpoints
- Read-through caching of single-book reads
- Pagination with navigation links
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Request, Response, status

from library_api.config import get_settings
from library_api.dependencies import BookCache, Books, CurrentUser, DbSession, Pagination
from library_api.schemas.book import (
    BookListResponse,
    BookResource,
    BookResponse,
    BookSnapshot,
    PageLinks,
    PageMeta,
)
from library_api.schemas.user import MessageResponse, ValidationErrorResponse
from library_api.services.validation import BOOK_RULES, validate

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
)

PROTECTED_RESPONSES = {
    401: {"model": MessageResponse, "description": "Unauthenticated"},
}
NOT_FOUND_RESPONSES = {
    404: {"model": MessageResponse, "description": "Book not found"},
}
INVALID_RESPONSES = {
    422: {"model": ValidationErrorResponse, "description": "Validation error"},
}

BOOK_EXAMPLE = {
    "title": "Dune",
    "author": "Frank Herbert",
    "summary": "Science-fiction epic centred on the planet Arrakis and the spice.",
    "isbn": "9780441013593",
}


# =============================================================================
# Helper Functions
# =============================================================================
def _page_url(path: str, page: int) -> str:
    return f"{path}?page={page}"


# =============================================================================
# CRUD Endpoints
# =============================================================================
@router.get(
    "",
    response_model=BookListResponse,
    name="list_books",
    summary="List all books",
    description="Get a paginated list of books, ordered by id. The page size is fixed.",
)
def list_books(
    request: Request,
    books: Books,
    pagination: Pagination,
) -> BookListResponse:
    """
    List books with pagination.

    Always reads from the database; list pages are never cached.

    Returns:
        {"data": [...], "links": {...}, "meta": {...}}
    """
    page = books.paginate(pagination.page, pagination.per_page)
    path = str(request.url_for("list_books"))

    return BookListResponse(
        data=[
            BookResource.from_snapshot(BookSnapshot.model_validate(book), request)
            for book in page.items
        ],
        links=PageLinks(
            first=_page_url(path, 1),
            last=_page_url(path, page.last_page),
            prev=_page_url(path, page.current_page - 1) if page.current_page > 1 else None,
            next=_page_url(path, page.current_page + 1) if page.current_page < page.last_page else None,
        ),
        meta=PageMeta(
            current_page=page.current_page,
            from_=page.first_index,
            last_page=page.last_page,
            path=path,
            per_page=page.per_page,
            to=page.last_index,
            total=page.total,
        ),
    )


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    name="get_book",
    summary="Get a book by ID",
    description="Retrieve a single book. Served from the cache when a live snapshot exists.",
    responses=NOT_FOUND_RESPONSES,
)
def get_book(
    request: Request,
    book_id: int,
    books: Books,
    cache: BookCache,
) -> BookResponse:
    """
    Get a single book by its ID.

    A cache hit never touches the database. A miss loads the book,
    stores its snapshot for CACHE_TTL_BOOKS seconds and returns it.
    Unknown ids are not cached.

    Raises:
        NotFound: 404 if book not found
    """
    snapshot = cache.get_or_populate(book_id, lambda: books.snapshot(book_id))

    return BookResponse(data=BookResource.from_snapshot(snapshot, request))


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    name="create_book",
    summary="Create a new book",
    description="Create a book. Requires a bearer token.",
    responses={**PROTECTED_RESPONSES, **INVALID_RESPONSES},
)
def create_book(
    request: Request,
    db: DbSession,
    books: Books,
    user: CurrentUser,
    payload: dict[str, Any] | None = Body(default=None, examples=[BOOK_EXAMPLE]),
) -> BookResponse:
    """
    Create a new book.

    Every field is validated first; nothing is written unless all rules
    pass, including ISBN uniqueness.

    Raises:
        ValidationFailed: 422 with every violation
    """
    fields = validate(payload, BOOK_RULES, db=db)

    book = books.create(fields)
    logger.info(f"User {user.id} created book {book.id}")

    return BookResponse(
        data=BookResource.from_snapshot(BookSnapshot.model_validate(book), request)
    )


@router.api_route(
    "/{book_id}",
    methods=["PUT", "PATCH"],
    response_model=BookResponse,
    name="update_book",
    summary="Update a book",
    description=(
        "Replace a book's fields. PUT and PATCH behave the same: every field "
        "is required. Requires a bearer token."
    ),
    responses={**PROTECTED_RESPONSES, **NOT_FOUND_RESPONSES, **INVALID_RESPONSES},
)
def update_book(
    request: Request,
    book_id: int,
    db: DbSession,
    books: Books,
    cache: BookCache,
    user: CurrentUser,
    payload: dict[str, Any] | None = Body(default=None, examples=[BOOK_EXAMPLE]),
) -> BookResponse:
    """
    Update an existing book.

    The ISBN may stay the same; it must not match a different book.

    Raises:
        NotFound: 404 if book not found
        ValidationFailed: 422 with every violation
    """
    books.get(book_id)
    fields = validate(payload, BOOK_RULES, db=db, ignore_id=book_id)

    book = books.update(book_id, fields)
    logger.info(f"User {user.id} updated book {book_id}")

    if settings.cache_invalidate_on_write:
        cache.invalidate(book_id)

    return BookResponse(
        data=BookResource.from_snapshot(BookSnapshot.model_validate(book), request)
    )


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    name="delete_book",
    summary="Delete a book",
    description="Permanently delete a book. Requires a bearer token.",
    responses={**PROTECTED_RESPONSES, **NOT_FOUND_RESPONSES},
)
def delete_book(
    book_id: int,
    books: Books,
    cache: BookCache,
    user: CurrentUser,
) -> None:
    """
    Delete a book.

    Returns 204 No Content on success.

    Raises:
        NotFound: 404 if book not found
    """
    books.delete(book_id)
    logger.info(f"User {user.id} deleted book {book_id}")

    if settings.cache_invalidate_on_write:
        cache.invalidate(book_id)
