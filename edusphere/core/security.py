"""Password hashing and credential generation.

bcrypt with a fixed work factor. Hashing is retried a bounded number of
times because the primitive can fail transiently; bad input is never the
reason for a retry.
"""
import secrets
from typing import Optional

import bcrypt

from edusphere.core.config import settings
from edusphere.core.errors import HashingFailed
from edusphere.core.logging import get_logger

logger = get_logger(__name__)

# bcrypt only considers the first 72 bytes of the secret
BCRYPT_MAX_BYTES = 72

RANDOM_PASSWORD_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789@#$!&"
)


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(
    plaintext: str,
    rounds: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> str:
    """Hash a password with a fresh salt.

    Args:
        plaintext: Password as typed by the user
        rounds: bcrypt cost factor (default from BCRYPT_ROUNDS)
        max_attempts: Attempts before giving up (default from HASH_MAX_ATTEMPTS)

    Returns:
        bcrypt hash as a string

    Raises:
        HashingFailed: If every attempt failed
    """
    rounds = rounds or settings.bcrypt_rounds
    max_attempts = max_attempts or settings.hash_max_attempts
    secret = _encode(plaintext)

    for attempt in range(1, max_attempts + 1):
        try:
            return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds)).decode("utf-8")
        except Exception as e:
            logger.warning(
                f"Password hash attempt {attempt} failed: {e}",
                extra={"attempt": attempt},
            )

    logger.error(f"Password hashing failed after {max_attempts} attempts")
    raise HashingFailed()


def verify_password(plaintext: str, hashed: Optional[str]) -> bool:
    """Compare a password with a stored bcrypt hash in constant time."""
    if not plaintext or not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plaintext), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def generate_random_password(length: int = 8) -> str:
    """Generate a random password for accounts provisioned without one.

    The caller sends the value to the account owner once and must not log it.
    """
    return "".join(secrets.choice(RANDOM_PASSWORD_ALPHABET) for _ in range(length))
