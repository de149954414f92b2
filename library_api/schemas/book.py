"""
Book Pydantic Schemas

Handles:
- Immutable snapshots of a book (what the read-through cache stores)
- The client-facing book representation (author upper-cased, HATEOAS links)
- Pagination envelope for list responses

Request bodies are validated by the rule tables in
library_api.services.validation, not by these schemas.
"""

from datetime import datetime

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field


class BookSnapshot(BaseModel):
    """
    Frozen copy of a Book row at read time.

    Detached from the database session, so it is safe to share between
    requests through the cache.
    """

    id: int
    title: str
    author: str
    summary: str
    isbn: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class BookLinks(BaseModel):
    """Absolute URLs of the operations available on a book."""

    self_: str = Field(..., alias="self", description="GET this book")
    update: str = Field(..., description="PUT/PATCH this book")
    delete: str = Field(..., description="DELETE this book")
    all: str = Field(..., description="GET the book list")

    model_config = ConfigDict(populate_by_name=True)


class BookResource(BaseModel):
    """
    Schema for book responses.

    The author is rendered upper-cased; the stored value is unchanged.
    """

    title: str = Field(..., description="Book title", examples=["Dune"])
    author: str = Field(..., description="Author, upper-cased", examples=["FRANK HERBERT"])
    summary: str = Field(..., description="Book summary")
    isbn: str = Field(..., description="13-character ISBN", examples=["9780441013593"])
    links: BookLinks = Field(..., alias="_links")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_snapshot(cls, book: BookSnapshot, request: Request) -> "BookResource":
        """Render a snapshot, resolving links against the current request."""
        book_url = str(request.url_for("get_book", book_id=book.id))
        return cls(
            title=book.title,
            author=book.author.upper(),
            summary=book.summary,
            isbn=book.isbn,
            links=BookLinks(
                self_=book_url,
                update=str(request.url_for("update_book", book_id=book.id)),
                delete=str(request.url_for("delete_book", book_id=book.id)),
                all=str(request.url_for("list_books")),
            ),
        )


class BookResponse(BaseModel):
    """Single book envelope: {"data": {...}}."""

    data: BookResource

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": {
                    "title": "Dune",
                    "author": "FRANK HERBERT",
                    "summary": "Science-fiction epic centred on the planet Arrakis.",
                    "isbn": "9780441013593",
                    "_links": {
                        "self": "http://localhost:8000/api/v1/books/2",
                        "update": "http://localhost:8000/api/v1/books/2",
                        "delete": "http://localhost:8000/api/v1/books/2",
                        "all": "http://localhost:8000/api/v1/books",
                    },
                }
            }
        },
    )


class PageLinks(BaseModel):
    """Navigation URLs; prev/next are null at the edges."""

    first: str
    last: str
    prev: str | None = None
    next: str | None = None


class PageMeta(BaseModel):
    """
    Pagination metadata.

    from/to are the 1-based positions of the first and last item on the
    page, null when the page is empty.
    """

    current_page: int = Field(..., ge=1, description="Current page number")
    from_: int | None = Field(default=None, alias="from")
    last_page: int = Field(..., ge=1, description="Number of the last page")
    path: str = Field(..., description="URL of the list endpoint")
    per_page: int = Field(..., ge=1, description="Items per page")
    to: int | None = Field(default=None)
    total: int = Field(..., ge=0, description="Total number of books")

    model_config = ConfigDict(populate_by_name=True)


class BookListResponse(BaseModel):
    """
    Schema for paginated book list responses.

    {"data": [...], "links": {...}, "meta": {...}}
    """

    data: list[BookResource]
    links: PageLinks
    meta: PageMeta
