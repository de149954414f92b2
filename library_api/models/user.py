"""
User Model

A registered account: display name, login email and bcrypt hash.
A user owns any number of personal access tokens; deleting the user
deletes them.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from library_api.database import Base

if TYPE_CHECKING:
    from library_api.models.token import PersonalAccessToken


# Webmail providers that do not identify an organisation
FREE_EMAIL_DOMAINS = frozenset({
    "aol.com",
    "free.fr",
    "gmail.com",
    "gmx.com",
    "googlemail.com",
    "hotmail.com",
    "hotmail.fr",
    "icloud.com",
    "laposte.net",
    "live.com",
    "mail.com",
    "me.com",
    "msn.com",
    "orange.fr",
    "outlook.com",
    "proton.me",
    "protonmail.com",
    "yahoo.com",
    "yahoo.fr",
    "yandex.com",
})


class User(Base):
    """
    An account that can log in and manage books.

    Table: users

    Indexes:
    - email: unique, also the login lookup key

    Example:
        user = User(
            name="John Doe",
            email="john@example.com",
            hashed_password=hash_password("password123"),
        )
    """

    __tablename__ = "users"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Identity Fields
    # -------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (used for login)"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the user registered"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    tokens: Mapped[list["PersonalAccessToken"]] = relationship(
        "PersonalAccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def uses_professional_email(self) -> bool:
        """
        Tell whether the email belongs to an organisation domain.

        Addresses at well-known free webmail providers (gmail.com,
        yahoo.com, ...) are not considered professional.
        """
        _, at, domain = (self.email or "").rpartition("@")
        return bool(at and domain) and domain.lower() not in FREE_EMAIL_DOMAINS

    def __repr__(self) -> str:
        """Developer-friendly string representation."""
        return f"User(id={self.id}, email='{self.email}')"
