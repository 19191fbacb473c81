"""Two-step password reset through an emailed link.

The token and its deadline live on the user record, not in the token
cache, and are always written and cleared together. A failed email clears
them again so no valid token exists without a delivered link.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from edusphere.core.config import Settings
from edusphere.core.errors import (
    EmailDeliveryFailed,
    EmailRequired,
    InvalidEmail,
    InvalidOrExpiredLink,
    MissingFields,
    NoAccountFound,
    PasswordMismatch,
    WeakPassword,
)
from edusphere.core.logging import get_logger, redact_email
from edusphere.core.security import hash_password
from edusphere.infrastructure.mailer import Mailer
from edusphere.infrastructure.store import CredentialStore
from edusphere.services.session import SessionService
from edusphere.services.templates import password_reset_email
from edusphere.utils.validators import is_strong_password, is_valid_email

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordResetService:
    def __init__(
        self,
        store: CredentialStore,
        mailer: Mailer,
        sessions: SessionService,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.mailer = mailer
        self.sessions = sessions
        self.clock = clock
        self.ttl = timedelta(seconds=settings.reset_token_ttl_seconds)
        self.base_url = settings.frontend_base_url

    def reset_url(self, token: str) -> str:
        return f"{self.base_url}/change-password/{token}"

    def request(self, email: Optional[str]) -> None:
        """Store a reset token on the account and email the link.

        Raises:
            EmailRequired, InvalidEmail, NoAccountFound: 400
            EmailDeliveryFailed: The link could not be sent; the token was cleared
        """
        if not email:
            raise EmailRequired()
        if not is_valid_email(email):
            raise InvalidEmail()
        if self.store.get_user_by_email(email) is None:
            raise NoAccountFound()

        token = str(uuid.uuid4())
        expires_at = self.clock() + self.ttl
        self.store.set_reset_token(email, token, expires_at)

        subject, html = password_reset_email(self.reset_url(token), int(self.ttl.total_seconds()))
        if not self.mailer.send(email, subject, html):
            self.store.set_reset_token(email, None, None)
            logger.warning("Password reset mail failed", extra={"email": redact_email(email)})
            raise EmailDeliveryFailed("Unable to send password reset email. Please try again later.")

        logger.info("Password reset link sent", extra={"email": redact_email(email)})

    def complete(
        self,
        new_password: Optional[str],
        confirm_password: Optional[str],
        token: Optional[str],
    ) -> None:
        """Set a new password using a reset token.

        Wrong and expired tokens are reported identically.

        Raises:
            MissingFields, WeakPassword, PasswordMismatch: 400, before any lookup
            InvalidOrExpiredLink: 400
            HashingFailed: 500
        """
        if not new_password or not confirm_password or not token:
            raise MissingFields()
        if not is_strong_password(new_password):
            raise WeakPassword()
        if new_password != confirm_password:
            raise PasswordMismatch("New password and confirm password do not match")

        user = self.store.get_user_by_reset_token(token, self.clock())
        if user is None:
            logger.warning("Invalid or expired reset link used")
            raise InvalidOrExpiredLink()

        password_hash = hash_password(new_password)
        if not self.store.complete_reset(user.id, token, password_hash):
            # Another request used the same token first
            raise InvalidOrExpiredLink()

        self.sessions.forget(user.email)
        logger.info("Password reset completed", extra={"user_id": user.id})
