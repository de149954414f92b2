"""
Services Package

This package contains business logic services that are:
- Separate from HTTP handling (routers)
- Reusable across different parts of the application
- Easier to test in isolation

Current services:
- books.py: Book repository (CRUD, pagination, ISBN uniqueness at commit)
- cache.py: Read-through TTL cache for single-book reads
- rate_limiter.py: Login throttling with slowapi
- security.py: Password hashing with passlib/bcrypt
- tokens.py: Bearer token issue, authentication and revocation
- users.py: Credential store (registration, credential checks)
- validation.py: Declarative rule tables and the generic validator
"""
