"""
Personal Access Token Model

Bearer tokens issued to users at login.

Security Features:
- Only a SHA-256 hash of the secret is stored (never plain text)
- The plain token is shown once, in the login response
- Logging out deletes the record, so the token can never be used again
- Tracks last usage for auditing
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from library_api.database import Base

if TYPE_CHECKING:
    from library_api.models.user import User


class PersonalAccessToken(Base):
    """
    Bearer token owned by exactly one user.

    Table: personal_access_tokens

    The value handed to the client is "<id>|<secret>"; token_hash holds
    the SHA-256 hex digest of <secret>.
    """

    __tablename__ = "personal_access_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
        comment="Owner of the token"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Label of the token (e.g. api-token)"
    )

    token_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
        comment="SHA-256 hash of the token secret"
    )

    # -------------------------------------------------------------------------
    # Audit Fields
    # -------------------------------------------------------------------------
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the token last authenticated a request"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the token was issued"
    )

    user: Mapped["User"] = relationship("User", back_populates="tokens")

    def __repr__(self) -> str:
        return f"PersonalAccessToken(id={self.id}, user_id={self.user_id}, name='{self.name}')"
