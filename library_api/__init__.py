"""
Library API Application Package

A small REST API for a catalog of books with user registration and bearer
token authentication.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain errors and the HTTP status they map to
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic response schemas
- routers/: API route handlers
- services/: Business logic (validation, tokens, cache, repositories)
"""

__version__ = "0.1.0"
