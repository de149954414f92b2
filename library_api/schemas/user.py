"""
User and Auth Pydantic Schemas

Schemas:
- UserResponse: Public user data (never exposes password)
- RegisterResponse: {"user": ...}
- LoginResponse: {"user": ..., "token": ...}
- MessageResponse: {"message": ...}
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """
    Schema for user responses (what the API returns).

    SECURITY: Never includes the password or its hash.
    """

    id: int = Field(..., description="Unique user identifier", examples=[1])
    name: str = Field(..., description="User's display name", examples=["John Doe"])
    email: str = Field(..., description="User's email address", examples=["john@example.com"])
    created_at: datetime | None = Field(default=None, description="When the user registered")
    updated_at: datetime | None = Field(default=None, description="When the user was last updated")

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(BaseModel):
    """Schema for POST /register."""

    user: UserResponse


class LoginResponse(BaseModel):
    """
    Schema for POST /login.

    The token is shown once; send it back as:
        Authorization: Bearer <token>
    """

    user: UserResponse
    token: str = Field(..., description="Bearer token", examples=["1|3f9c0a..."])


class MessageResponse(BaseModel):
    """Plain message body (logout, errors)."""

    message: str = Field(..., examples=["Logged out"])


class ValidationErrorResponse(BaseModel):
    """Body of a 422 response."""

    message: str = Field(..., examples=["The email has already been taken."])
    errors: dict[str, list[str]] = Field(
        ...,
        examples=[{"email": ["The email has already been taken."]}],
    )
