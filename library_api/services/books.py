"""
Book Repository

Persistence of book records: create, read, update, delete, and paginated
listing.

ISBN uniqueness is enforced by the unique index on books.isbn. The
"unique" validation rule catches duplicates earlier with a readable
message; the index closes the race between that check and the commit, and
an IntegrityError from it is reported the same way.

Every mutation either commits fully or is rolled back.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_api.database import MAX_ROW_ID
from library_api.exceptions import NotFound, ValidationFailed
from library_api.models import Book
from library_api.schemas.book import BookSnapshot
from library_api.services.validation import MESSAGES

logger = logging.getLogger(__name__)

BOOK_FIELDS = ("title", "author", "summary", "isbn")


@dataclass(frozen=True)
class Page:
    """
    One page of a stable-ordered listing.

    Attributes:
        items: Records on this page
        total: Total number of records
        current_page: 1-based page number
        per_page: Page size
    """

    items: list[Book]
    total: int
    current_page: int
    per_page: int

    @property
    def last_page(self) -> int:
        """Number of the last page (1 when the listing is empty)."""
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def first_index(self) -> int | None:
        """1-based position of the first item on the page."""
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_index(self) -> int | None:
        """1-based position of the last item on the page."""
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + len(self.items)


class BookRepository:
    """
    Book storage bound to one database session.

    Usage:
        repo = BookRepository(db)
        book = repo.create({"title": ..., "author": ..., "summary": ..., "isbn": ...})
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get(self, book_id: int) -> Book:
        """
        Get a book by ID.

        Raises:
            NotFound: If no book has this id
        """
        if not 1 <= book_id <= MAX_ROW_ID:
            raise NotFound("Book", book_id)

        book = self.db.get(Book, book_id)
        if book is None:
            raise NotFound("Book", book_id)
        return book

    def snapshot(self, book_id: int) -> BookSnapshot:
        """Read a book and detach it as an immutable snapshot."""
        return BookSnapshot.model_validate(self.get(book_id))

    def paginate(self, page: int, per_page: int) -> Page:
        """
        Return one page of books ordered by id.

        Pages past the end are empty but still report the total.
        """
        total = self.db.execute(select(func.count()).select_from(Book)).scalar() or 0

        stmt = (
            select(Book)
            .order_by(Book.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        books = list(self.db.execute(stmt).scalars().all())

        return Page(items=books, total=total, current_page=page, per_page=per_page)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def create(self, fields: dict[str, Any]) -> Book:
        """
        Insert a book from validated fields.

        Raises:
            ValidationFailed: If the ISBN is already used
        """
        book = Book(**{name: fields[name] for name in BOOK_FIELDS})
        self.db.add(book)
        self._commit(book.isbn)
        self.db.refresh(book)

        logger.info(f"Created book {book.id} (isbn={book.isbn})")
        return book

    def update(self, book_id: int, fields: dict[str, Any]) -> Book:
        """
        Overwrite a book's fields in place.

        Raises:
            NotFound: If no book has this id
            ValidationFailed: If the new ISBN belongs to another book
        """
        book = self.get(book_id)
        for name in BOOK_FIELDS:
            if name in fields:
                setattr(book, name, fields[name])

        self._commit(book.isbn)
        self.db.refresh(book)

        logger.info(f"Updated book {book.id}")
        return book

    def delete(self, book_id: int) -> None:
        """
        Permanently delete a book.

        Raises:
            NotFound: If no book has this id
        """
        book = self.get(book_id)
        self.db.delete(book)
        self.db.commit()

        logger.info(f"Deleted book {book_id}")

    def _commit(self, isbn: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"ISBN uniqueness violated at commit: {isbn}")
            raise ValidationFailed({"isbn": [MESSAGES["unique"].format(attribute="isbn")]})
