"""
SQLAlchemy Models Package

This package contains all database models for the Library API.

Model Relationships:
- User -> PersonalAccessToken: One-to-Many (a user may hold several live
  tokens, each token belongs to exactly one user)
- Book: standalone

Import all models here to:
1. Make them available as: from library_api.models import Book, User
2. Ensure Alembic discovers them for migrations
"""

from library_api.models.user import User
from library_api.models.token import PersonalAccessToken
from library_api.models.book import Book

__all__ = [
    "User",
    "PersonalAccessToken",
    "Book",
]
