"""Password change for an authenticated user."""
from typing import Optional

from edusphere.core.errors import (
    MissingFields,
    OldPasswordIncorrect,
    PasswordMismatch,
    UserNotFound,
    WeakPassword,
)
from edusphere.core.logging import get_logger
from edusphere.core.security import hash_password, verify_password
from edusphere.infrastructure.store import CredentialStore
from edusphere.services.session import SessionService
from edusphere.utils.validators import is_strong_password

logger = get_logger(__name__)


class PasswordChangeService:
    def __init__(self, store: CredentialStore, sessions: SessionService):
        self.store = store
        self.sessions = sessions

    def change(
        self,
        user_id: str,
        old_password: Optional[str],
        new_password: Optional[str],
        confirm_new_password: Optional[str],
    ) -> None:
        """Replace the password after checking the current one.

        The login snapshot for the account is dropped so the next login
        sees the new hash.
        """
        if not old_password or not new_password or not confirm_new_password:
            raise MissingFields()
        if not is_strong_password(new_password):
            raise WeakPassword()
        if new_password != confirm_new_password:
            raise PasswordMismatch("New password and confirm password do not match")

        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFound("User not found")

        if not verify_password(old_password, user.password):
            logger.warning("Old password incorrect", extra={"user_id": user_id})
            raise OldPasswordIncorrect()

        self.store.update_password(user.id, hash_password(new_password))
        self.sessions.forget(user.email)
        logger.info("Password changed", extra={"user_id": user_id})
