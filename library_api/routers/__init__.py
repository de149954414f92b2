"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- auth.py: /api/v1/register, /api/v1/login, /api/v1/logout
- books.py: /api/v1/books/* endpoints

Each router is imported and registered in main.py.
"""

from library_api.routers.auth import router as auth_router
from library_api.routers.books import router as books_router

__all__ = [
    "auth_router",
    "books_router",
]
