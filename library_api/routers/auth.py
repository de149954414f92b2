"""
Authentication Router

Handles user authentication endpoints:
- Registration (name/email/password)
- Login (email/password → bearer token)
- Logout (revoke the presented token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords and tokens are never logged or stored
- Tokens are opaque; only their SHA-256 hash is persisted
- Login is rate limited per client IP
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Request, status

from library_api.config import get_settings
from library_api.dependencies import CurrentToken, DbSession
from library_api.schemas.user import (
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    UserResponse,
    ValidationErrorResponse,
)
from library_api.services.rate_limiter import limiter
from library_api.services.tokens import issue_token, revoke_token
from library_api.services.users import check_credentials, register_user
from library_api.services.validation import LOGIN_RULES, REGISTER_RULES, validate

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    tags=["Auth"],
    responses={
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)


# -------------------------------------------------------------------------
# Registration Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new user account.

    **Rules:**
    - name: required, at most 255 characters
    - email: required, valid address, at most 255 characters, not yet registered
    - password: required, at least 8 characters
    """,
)
def register(
    db: DbSession,
    payload: dict[str, Any] | None = Body(
        default=None,
        examples=[{"name": "John Doe", "email": "john@example.com", "password": "password123"}],
    ),
) -> RegisterResponse:
    """
    Register a new user with email and password.

    1. Validates every field (all violations reported together)
    2. Hashes the password with bcrypt
    3. Creates the user record
    4. Returns user data (without password)
    """
    fields = validate(payload, REGISTER_RULES, db=db)

    user = register_user(db, fields["name"], fields["email"], fields["password"])

    return RegisterResponse(user=UserResponse.model_validate(user))


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive a bearer token.

    **Usage:**
    Include the token in the Authorization header:
    ```
    Authorization: Bearer <token>
    ```

    Each login issues a new token; earlier tokens stay valid until logout.
    """,
    responses={
        401: {"model": MessageResponse, "description": "Invalid credentials"},
        429: {"description": "Too many login attempts"},
    },
)
@limiter.limit(settings.rate_limit_login)
def login(
    request: Request,
    db: DbSession,
    payload: dict[str, Any] | None = Body(
        default=None,
        examples=[{"email": "john@example.com", "password": "password123"}],
    ),
) -> LoginResponse:
    """
    Authenticate user and return a new bearer token.

    Wrong email and wrong password produce the same 401 response.
    """
    fields = validate(payload, LOGIN_RULES)

    user = check_credentials(db, fields["email"], fields["password"])
    plain_token, _ = issue_token(db, user, name=settings.token_name)

    logger.info(f"User logged in: {user.email}")

    return LoginResponse(user=UserResponse.model_validate(user), token=plain_token)


# -------------------------------------------------------------------------
# Logout Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout user",
    description="""
    Revoke the bearer token used for this request.

    Other tokens of the same user remain valid.
    """,
    responses={
        401: {"model": MessageResponse, "description": "Unauthenticated"},
    },
)
def logout(
    db: DbSession,
    token: CurrentToken,
) -> MessageResponse:
    """Delete the presented token so it can never authenticate again."""
    user_email = token.user.email

    revoke_token(db, token)

    logger.info(f"User logged out: {user_email}")

    return MessageResponse(message="Logged out")
