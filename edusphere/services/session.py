"""Login and session issuance.

Logins read the ``user:<email>`` snapshot from the token cache before
touching the store and fill it on a miss. Nothing in this module corrects
the snapshot, so a password changed directly in the store is not seen
until the entry expires.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from edusphere.core.auth import create_access_token
from edusphere.core.config import Settings
from edusphere.core.errors import (
    EmailRequired,
    InvalidEmail,
    MissingFields,
    UserNotFound,
    WrongPassword,
)
from edusphere.core.logging import get_logger, redact_email
from edusphere.core.security import verify_password
from edusphere.domain.user import Profile, User
from edusphere.infrastructure.redis import TokenCache
from edusphere.infrastructure.store import CredentialStore
from edusphere.utils.validators import is_valid_email

logger = get_logger(__name__)


def login_cache_key(email: str) -> str:
    return f"user:{email}"


@dataclass
class LoginResult:
    """Issued session token and the user view returned to the client."""
    token: str
    user: Dict[str, Any]
    expires_in: int


class SessionService:
    def __init__(self, store: CredentialStore, cache: TokenCache, settings: Settings):
        self.store = store
        self.cache = cache
        self.cache_ttl_seconds = settings.login_cache_ttl_seconds
        self.token_lifetime = timedelta(minutes=settings.access_token_expire_minutes)

    def _load_from_cache(self, email: str) -> Optional[Tuple[User, Optional[Profile]]]:
        snapshot = self.cache.get(login_cache_key(email))
        if not snapshot:
            return None
        try:
            user = User.model_validate(snapshot["user"])
            profile = Profile.model_validate(snapshot["profile"]) if snapshot.get("profile") else None
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding unreadable login snapshot")
            self.cache.delete(login_cache_key(email))
            return None
        return user, profile

    def _load_from_store(self, email: str) -> Optional[Tuple[User, Optional[Profile]]]:
        user = self.store.get_user_by_email(email)
        if user is None:
            return None
        profile = self.store.get_profile(user.profile_id)
        snapshot = {
            "user": user.model_dump(mode="json"),
            "profile": profile.model_dump(mode="json") if profile else None,
        }
        self.cache.set(login_cache_key(email), snapshot, self.cache_ttl_seconds)
        return user, profile

    def _resolve(self, email: str) -> Tuple[User, Optional[Profile]]:
        found = self._load_from_cache(email)
        if found is not None:
            logger.debug("Login snapshot hit", extra={"email": redact_email(email)})
            return found

        found = self._load_from_store(email)
        if found is None:
            raise UserNotFound()
        return found

    def _issue(self, user: User, profile: Optional[Profile]) -> LoginResult:
        token = create_access_token(user, expires_delta=self.token_lifetime)
        view = user.public_view(profile)
        view["token"] = token
        return LoginResult(
            token=token,
            user=view,
            expires_in=int(self.token_lifetime.total_seconds()),
        )

    def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """Verify a password login and issue a session.

        Raises:
            MissingFields, InvalidEmail: Bad input
            UserNotFound: No account for the address
            WrongPassword: Password does not match the stored hash
        """
        if not email or not password:
            raise MissingFields("Please fill all the inputs")
        if not is_valid_email(email):
            raise InvalidEmail()

        user, profile = self._resolve(email)

        if not verify_password(password, user.password):
            logger.warning("Wrong password", extra={"user_id": user.id})
            raise WrongPassword()

        logger.info("Login successful", extra={"user_id": user.id})
        return self._issue(user, profile)

    def login_verified_identity(self, email: Optional[str]) -> LoginResult:
        """Issue a session for an address already verified by an identity provider."""
        if not email:
            raise EmailRequired()

        user = self.store.get_user_by_email(email)
        if user is None:
            raise UserNotFound()
        profile = self.store.get_profile(user.profile_id)

        logger.info("Identity login successful", extra={"user_id": user.id})
        return self._issue(user, profile)

    def forget(self, email: str) -> None:
        """Drop the login snapshot for an address."""
        self.cache.delete(login_cache_key(email))
