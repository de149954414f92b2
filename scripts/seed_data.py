#!/usr/bin/env python3
"""
Database Seed Script

Populates the books table with a small sample catalog.

USAGE:
    # From the project root with the virtualenv activated
    python scripts/seed_data.py

    # Keep books that are already there
    python scripts/seed_data.py --keep
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select
from sqlalchemy.orm import Session

from library_api.config import get_settings
from library_api.database import SessionLocal, create_tables
from library_api.models import Book

SAMPLE_BOOKS = [
    {
        "title": "1984",
        "author": "George Orwell",
        "summary": "Roman dystopique décrivant une société totalitaire "
                   "contrôlée par Big Brother.",
        "isbn": "9780451524935",
    },
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "summary": "Épopée de science-fiction centrée sur la planète Arrakis "
                   "et les enjeux autour de l’épice.",
        "isbn": "9780441013593",
    },
    {
        "title": "Le Seigneur des Anneaux",
        "author": "J.R.R. Tolkien",
        "summary": "Trilogie racontant la quête pour détruire l’Anneau unique "
                   "et vaincre Sauron.",
        "isbn": "9780544003415",
    },
]


def clear_data(db: Session) -> None:
    """Delete every book."""
    print("Clearing existing books...")
    db.query(Book).delete()
    db.commit()
    print("Books cleared.")


def create_books(db: Session) -> list[Book]:
    """Insert the sample catalog, skipping ISBNs that already exist."""
    print("Creating books...")

    existing = set(db.scalars(select(Book.isbn)))
    books = [Book(**data) for data in SAMPLE_BOOKS if data["isbn"] not in existing]
    db.add_all(books)
    db.commit()

    print(f"Created {len(books)} books.")
    return books


def seed_database(clear_existing: bool = True) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing books before seeding.
    """
    settings = get_settings()

    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()
    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        books = create_books(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print(f"\n  - Books: {len(books)}")
        print(f"\nBooks are listed at http://{settings.host}:{settings.port}{settings.api_prefix}/books")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the books table")
    parser.add_argument("--keep", action="store_true", help="Keep existing books")
    args = parser.parse_args()
    seed_database(clear_existing=not args.keep)
