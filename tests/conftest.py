"""
pytest Fixtures for Library API Tests

Every test gets its own in-memory SQLite database and its own book cache
driven by a fake clock, so tests never see each other's rows or cached
snapshots.

FIXTURE SCOPES:
- engine, db_session, client: function (fresh per test)
- sample data: function, built on db_session
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from library_api.database import Base, get_db
from library_api.main import app
from library_api.models import Book, User
from library_api.services.cache import ReadThroughCache
from library_api.services.security import hash_password
from library_api.services.tokens import issue_token


# =============================================================================
# CLOCK AND CACHE FIXTURES
# =============================================================================
class FakeClock:
    """Manually advanced time source for cache expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def book_cache(fake_clock: FakeClock) -> ReadThroughCache:
    """Book cache with a one hour TTL measured on fake_clock."""
    return ReadThroughCache(ttl_seconds=3600, clock=fake_clock, name="book")


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the single connection alive, otherwise the in-memory
    database would disappear between connections.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Session on the test database, shared with the client fixture."""
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )
    session = TestSessionLocal()

    yield session

    session.close()


@pytest.fixture
def client(
    db_session: Session,
    book_cache: ReadThroughCache,
) -> Generator[TestClient, None, None]:
    """
    Create a test client bound to the test database and test cache.

    get_db is overridden to hand out db_session, and the application's
    book cache is swapped for book_cache for the duration of the test.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    original_cache = app.state.book_cache
    app.state.book_cache = book_cache

    with TestClient(app) as test_client:
        yield test_client

    app.state.book_cache = original_cache
    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
@pytest.fixture
def sample_user(db_session: Session) -> User:
    """John Doe, password "password123"."""
    user = User(
        name="John Doe",
        email="john@example.com",
        hashed_password=hash_password("password123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_token(db_session: Session, sample_user: User) -> str:
    """Plain bearer token issued to sample_user."""
    plain_token, _ = issue_token(db_session, sample_user)
    return plain_token


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def book_payload() -> dict[str, str]:
    """A valid create/update body."""
    return {
        "title": "Dune",
        "author": "Frank Herbert",
        "summary": "Épopée de science-fiction centrée sur la planète Arrakis.",
        "isbn": "9780441013593",
    }


@pytest.fixture
def sample_book(db_session: Session) -> Book:
    book = Book(
        title="1984",
        author="George Orwell",
        summary="Roman dystopique décrivant une société totalitaire.",
        isbn="9780451524935",
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session) -> list[Book]:
    """Five books, enough for three pages."""
    books = [
        Book(
            title=f"Test Book {i + 1}",
            author=f"Author Number {i + 1}",
            summary=f"Summary for test book {i + 1}.",
            isbn=f"978000000000{i}",
        )
        for i in range(5)
    ]
    db_session.add_all(books)
    db_session.commit()
    for book in books:
        db_session.refresh(book)
    return books
