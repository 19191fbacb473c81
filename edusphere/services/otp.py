"""One-time codes proving control of an email address.

Per email the state is either absent or an active code in the token cache
under ``otp:<email>``. Requesting while a code is active resends nothing
and keeps the code. A code is stored only after its email was delivered
and is deleted the first time it is consumed.
"""
import hmac
import secrets
from typing import Optional

from edusphere.core.config import Settings
from edusphere.core.errors import (
    AccountExists,
    CacheUnavailable,
    EmailDeliveryFailed,
    EmailRequired,
    InvalidEmail,
    OtpExpiredOrMissing,
    OtpMismatch,
)
from edusphere.core.logging import get_logger, redact_email
from edusphere.infrastructure.mailer import Mailer
from edusphere.infrastructure.redis import TokenCache
from edusphere.infrastructure.store import CredentialStore
from edusphere.services.templates import otp_email
from edusphere.utils.validators import is_valid_email

logger = get_logger(__name__)

OTP_DIGITS = 6


def otp_key(email: str) -> str:
    return f"otp:{email}"


def generate_otp() -> str:
    """Six random decimal digits, leading zeros kept."""
    return f"{secrets.randbelow(10 ** OTP_DIGITS):0{OTP_DIGITS}d}"


class OtpService:
    def __init__(
        self,
        store: CredentialStore,
        cache: TokenCache,
        mailer: Mailer,
        settings: Settings,
    ):
        self.store = store
        self.cache = cache
        self.mailer = mailer
        self.ttl_seconds = settings.otp_ttl_seconds

    def request(self, email: Optional[str], first_name: str = "", last_name: str = "") -> bool:
        """Send a verification code to an unregistered address.

        Returns:
            True if a new code was sent, False if an active one was reused

        Raises:
            EmailRequired, InvalidEmail: Bad input
            AccountExists: The address already has an account
            EmailDeliveryFailed: The code could not be sent; nothing was stored
            CacheUnavailable: The code was sent but could not be stored
        """
        if not email:
            raise EmailRequired()
        if not is_valid_email(email):
            raise InvalidEmail()
        if self.store.get_user_by_email(email) is not None:
            raise AccountExists()

        key = otp_key(email)
        if self.cache.get(key) is not None:
            logger.info("Active OTP reused", extra={"email": redact_email(email)})
            return False

        code = generate_otp()
        subject, html = otp_email(first_name or "", last_name or "", code, self.ttl_seconds)
        if not self.mailer.send(email, subject, html):
            raise EmailDeliveryFailed("Failed to send OTP email. Please try again later.")

        if not self.cache.set(key, code, self.ttl_seconds):
            raise CacheUnavailable()

        logger.info("OTP issued", extra={"email": redact_email(email)})
        return True

    def verify(self, email: str, supplied: str) -> None:
        """Check a code without consuming it."""
        active = self.cache.get(otp_key(email))
        if active is None:
            raise OtpExpiredOrMissing()
        if not hmac.compare_digest(str(active), str(supplied)):
            logger.warning("OTP mismatch", extra={"email": redact_email(email)})
            raise OtpMismatch()

    def consume(self, email: str, supplied: str) -> None:
        """Check a code and delete it so it cannot be replayed."""
        self.verify(email, supplied)
        self.cache.delete(otp_key(email))

    def discard(self, email: str) -> None:
        """Drop the active code without checking it; a no-op when none is active."""
        self.cache.delete(otp_key(email))

    def peek(self, email: str) -> Optional[str]:
        """Return the active code for an address, if any."""
        return self.cache.get(otp_key(email))
