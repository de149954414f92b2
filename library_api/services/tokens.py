"""
Token Service

Issues, validates, and revokes the opaque bearer tokens handed out at
login.

Security Features:
=================
1. Secrets come from the secrets module (40 hex characters)
2. Only the SHA-256 hash of a secret is stored
3. The plain token is returned once, at issue time
4. Revoking deletes the record, so a revoked token can never match again

Token format:
    "<record id>|<secret>"   e.g. "7|3f9c...e1"

The id prefix lets authentication fetch the record by primary key and
compare hashes in constant time. A bare "<secret>" is also accepted and
looked up by hash.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from library_api.database import MAX_ROW_ID
from library_api.exceptions import Unauthenticated
from library_api.models import PersonalAccessToken, User

logger = logging.getLogger(__name__)

SECRET_BYTES = 20  # 40 hex characters


def generate_secret() -> tuple[str, str]:
    """
    Generate a new token secret.

    Returns:
        Tuple of (secret, secret_hash)
        - secret: The value to show the user (only once!)
        - secret_hash: SHA-256 hash to store in database
    """
    secret = secrets.token_hex(SECRET_BYTES)
    return secret, hash_secret(secret)


def hash_secret(secret: str) -> str:
    """
    Hash a token secret using SHA-256.

    Returns:
        SHA-256 hash of the secret (64 hex characters)
    """
    return hashlib.sha256(secret.encode()).hexdigest()


def issue_token(
    db: Session,
    user: User,
    name: str = "api-token",
) -> tuple[str, PersonalAccessToken]:
    """
    Create a new bearer token for user.

    Args:
        db: Database session
        user: Owner of the token
        name: Label stored with the token

    Returns:
        Tuple of (plain_token, token_record)
        - plain_token: "<id>|<secret>", show this to the user ONCE
        - token_record: The database record
    """
    secret, secret_hash = generate_secret()

    token = PersonalAccessToken(
        user_id=user.id,
        name=name,
        token_hash=secret_hash,
    )

    db.add(token)
    db.commit()
    db.refresh(token)

    logger.info(f"Issued token {token.id} for user {user.id}")

    return f"{token.id}|{secret}", token


def _find_token(db: Session, presented: str) -> PersonalAccessToken | None:
    """Resolve a presented token to its record, or None."""
    if "|" not in presented:
        stmt = select(PersonalAccessToken).where(
            PersonalAccessToken.token_hash == hash_secret(presented)
        )
        return db.execute(stmt).scalar_one_or_none()

    token_id, _, secret = presented.partition("|")
    if not token_id.isdecimal() or not secret or int(token_id) > MAX_ROW_ID:
        return None

    token = db.get(PersonalAccessToken, int(token_id))
    if token is None:
        return None

    if not hmac.compare_digest(token.token_hash, hash_secret(secret)):
        return None

    return token


def authenticate_token(db: Session, presented: str | None) -> PersonalAccessToken:
    """
    Validate a presented bearer token.

    Checks:
    1. A token was presented
    2. A live record matches it (revoked tokens no longer exist)

    On success the token's last_used_at is updated. The authenticated user
    is token.user.

    Args:
        db: Database session
        presented: The plain token from the Authorization header

    Returns:
        The matching PersonalAccessToken record

    Raises:
        Unauthenticated: If the token is missing, malformed, or unknown
    """
    if not presented:
        raise Unauthenticated()

    token = _find_token(db, presented)
    if token is None:
        logger.warning("Rejected unknown or revoked bearer token")
        raise Unauthenticated()

    token.last_used_at = datetime.now(timezone.utc)
    db.commit()

    return token


def revoke_token(db: Session, token: PersonalAccessToken) -> None:
    """
    Revoke a token by deleting its record.

    Args:
        db: Database session
        token: The record to delete
    """
    token_id, user_id = token.id, token.user_id

    db.delete(token)
    db.commit()

    logger.info(f"Revoked token {token_id} for user {user_id}")
