"""
Test Suite for Library API

Test Organization:
- conftest.py: Shared fixtures (test database, client, fake clock, sample data)
- test_books.py: /api/v1/books endpoints
- test_book_cache.py: Read-through caching of GET /api/v1/books/{id}
- test_auth.py: /api/v1/register, /api/v1/login, /api/v1/logout
- test_tokens.py: Bearer token service
- test_validation.py: Rule tables and the generic validator
- test_cache.py: ReadThroughCache in isolation
- test_users.py: User model helpers
- test_app.py: Configuration, health and root endpoints

Running Tests:
    pytest
    pytest tests/test_books.py
    pytest -v
"""
