"""
Security Service

Handles password hashing and verification.

Security Features:
==================
1. Password hashing with bcrypt (passlib)
2. Salted hashes: the same password never hashes to the same value twice
3. Constant-time verification

Usage:
    from library_api.services.security import hash_password, verify_password

    hashed = hash_password("password123")
    is_valid = verify_password("password123", hashed)
"""

import logging

from passlib.context import CryptContext

from library_api.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# -------------------------------------------------------------------------
# Password Hashing Configuration
# -------------------------------------------------------------------------
# - schemes: bcrypt is the only accepted algorithm
# - deprecated: "auto" means old hashes are automatically upgraded
# - bcrypt__rounds: cost factor (lowered in the test suite)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password

    Example:
        >>> hashed = hash_password("password123")
        >>> hashed.startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The password to verify
        hashed_password: The stored bcrypt hash

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        # Malformed or unknown hash stored for the user
        logger.warning(f"Password verification error: {e}")
        return False
