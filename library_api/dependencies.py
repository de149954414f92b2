"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- Database sessions (per-request)
- The book repository bound to that session
- The process-wide book cache (owned by app.state)
- Bearer token authentication
- Pagination parameters
"""

from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from library_api.config import get_settings
from library_api.database import MAX_ROW_ID, get_db
from library_api.exceptions import Unauthenticated
from library_api.models import PersonalAccessToken, User
from library_api.schemas.book import BookSnapshot
from library_api.services.books import BookRepository
from library_api.services.cache import ReadThroughCache
from library_api.services.tokens import authenticate_token

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def list_books(db: Session = Depends(get_db)):
#
# You can write:
#   def list_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Book Repository and Cache
# =============================================================================
def get_book_repository(db: DbSession) -> BookRepository:
    """Book repository bound to the request's database session."""
    return BookRepository(db)


def get_book_cache(request: Request) -> ReadThroughCache[BookSnapshot]:
    """
    The book cache created by the application factory.

    It lives on app.state for the lifetime of the process, so tests can
    swap it for one driven by a fake clock.
    """
    return request.app.state.book_cache


Books = Annotated[BookRepository, Depends(get_book_repository)]
BookCache = Annotated[ReadThroughCache[BookSnapshot], Depends(get_book_cache)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Pagination parameters for the book list.

    Only the page is chosen by the client; the page size is fixed by
    the BOOKS_PER_PAGE setting.

        GET /books?page=2
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            le=MAX_ROW_ID,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
    ) -> None:
        self.page = page
        self.per_page = settings.books_per_page


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Bearer Token Authentication
# =============================================================================
# HTTPBearer extracts the token from the "Authorization: Bearer <token>"
# header and adds the "Authorize" button to Swagger UI. auto_error=False
# lets us answer with our own 401 body instead of FastAPI's 403.

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_token(
    db: DbSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> PersonalAccessToken:
    """
    Validate the bearer token of the request.

    Runs before the route handler; a protected handler never executes for
    an unauthenticated request.

    Returns:
        The token record (its owner is token.user)

    Raises:
        Unauthenticated: 401 if the header is missing or the token invalid
    """
    if credentials is None:
        raise Unauthenticated()

    return authenticate_token(db, credentials.credentials)


CurrentToken = Annotated[PersonalAccessToken, Depends(get_current_token)]


def get_current_user(token: CurrentToken) -> User:
    """The user owning the presented bearer token."""
    return token.user


CurrentUser = Annotated[User, Depends(get_current_user)]
