"""
User Service (credential store)

Persists user identities and checks login credentials.

Email uniqueness is enforced twice: by the "unique" validation rule before
the insert, and by the unique index on users.email, which closes the window
between that check and the commit when two registrations race.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_api.exceptions import Unauthenticated, ValidationFailed
from library_api.models import User
from library_api.services.security import hash_password, verify_password
from library_api.services.validation import MESSAGES

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def get_user_by_email(db: Session, email: str) -> User | None:
    """Look up a user by exact email address."""
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def register_user(db: Session, name: str, email: str, password: str) -> User:
    """
    Create a user with a bcrypt-hashed password.

    Args:
        db: Database session
        name: Display name
        email: Login email (must be unused)
        password: Plain text password, hashed before storage

    Returns:
        The persisted user

    Raises:
        ValidationFailed: If the email was taken concurrently
    """
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
    )

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Registration lost a race on email: {email}")
        raise ValidationFailed({"email": [MESSAGES["unique"].format(attribute="email")]})

    db.refresh(user)
    logger.info(f"New user registered: {user.email}")
    return user


def check_credentials(db: Session, email: str, password: str) -> User:
    """
    Return the user owning email if password matches.

    Raises:
        Unauthenticated: If no such user exists or the password is wrong
            (same message in both cases)
    """
    user = get_user_by_email(db, email)

    if user is None:
        logger.warning(f"Login failed: user not found for {email}")
        raise Unauthenticated(INVALID_CREDENTIALS)

    if not verify_password(password, user.hashed_password):
        logger.warning(f"Login failed: incorrect password for {email}")
        raise Unauthenticated(INVALID_CREDENTIALS)

    return user
