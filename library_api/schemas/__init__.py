"""
Pydantic Schemas Package

This package contains Pydantic models for API responses.

WHY Separate Schemas from SQLAlchemy Models?
============================================
1. Security: Control exactly what data is exposed in API responses
2. Decoupling: Database schema can evolve independently of API
3. Documentation: Schemas generate OpenAPI documentation

Request payloads are checked by the rule tables in
library_api.services.validation.
"""

from library_api.schemas.book import (
    BookLinks,
    BookListResponse,
    BookResource,
    BookResponse,
    BookSnapshot,
    PageLinks,
    PageMeta,
)
from library_api.schemas.user import (
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    UserResponse,
    ValidationErrorResponse,
)

__all__ = [
    # Book schemas
    "BookSnapshot",
    "BookLinks",
    "BookResource",
    "BookResponse",
    "BookListResponse",
    "PageLinks",
    "PageMeta",
    # User/Auth schemas
    "UserResponse",
    "RegisterResponse",
    "LoginResponse",
    "MessageResponse",
    "ValidationErrorResponse",
]
