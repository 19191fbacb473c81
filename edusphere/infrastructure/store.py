"""Credential store for users, profiles, uploaded files and tags.

``CredentialStore`` is the contract the account flows depend on. The
in-memory implementation enforces email and tag-name uniqueness itself and
hands out copies, so callers never mutate stored records by accident.
"""
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from edusphere.core.logging import get_logger
from edusphere.domain.user import Profile, Tag, UploadedFile, User

logger = get_logger(__name__)


class ConstraintViolation(Exception):
    """Raised when a storage-layer uniqueness constraint is violated."""

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class CredentialStore(Protocol):
    def create_profile(self, profile: Profile) -> Profile: ...

    def get_profile(self, profile_id: str) -> Optional[Profile]: ...

    def delete_profile(self, profile_id: str) -> bool: ...

    def create_user(self, user: User) -> User: ...

    def get_user(self, user_id: str) -> Optional[User]: ...

    def get_user_by_email(self, email: str) -> Optional[User]: ...

    def get_user_by_reset_token(self, token: str, now: datetime) -> Optional[User]: ...

    def update_password(self, user_id: str, password_hash: str) -> Optional[User]: ...

    def set_reset_token(
        self, email: str, token: Optional[str], expires_at: Optional[datetime]
    ) -> Optional[User]: ...

    def complete_reset(self, user_id: str, token: str, password_hash: str) -> bool: ...

    def delete_user(self, user_id: str) -> bool: ...

    def create_file(self, record: UploadedFile) -> UploadedFile: ...

    def create_tag(self, tag: Tag) -> Tag: ...

    def list_tags(self) -> List[Tag]: ...


class MemoryCredentialStore:
    """Thread-safe in-process store."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.users: Dict[str, User] = {}
        self.profiles: Dict[str, Profile] = {}
        self.files: Dict[str, UploadedFile] = {}
        self.tags: Dict[str, Tag] = {}

    # Profiles

    def create_profile(self, profile: Profile) -> Profile:
        with self._lock:
            self.profiles[profile.id] = profile.model_copy()
            return profile.model_copy()

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        with self._lock:
            profile = self.profiles.get(profile_id)
            return profile.model_copy() if profile else None

    def delete_profile(self, profile_id: str) -> bool:
        with self._lock:
            return self.profiles.pop(profile_id, None) is not None

    # Users

    def create_user(self, user: User) -> User:
        with self._lock:
            if any(existing.email == user.email for existing in self.users.values()):
                raise ConstraintViolation("email already exists", {"field": "email"})
            self.users[user.id] = user.model_copy()
            logger.debug("User created", extra={"user_id": user.id})
            return user.model_copy()

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self.users.get(user_id)
            return user.model_copy() if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self.users.values():
                if user.email == email:
                    return user.model_copy()
            return None

    def get_user_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        """Find the user holding ``token`` whose deadline is still ahead of ``now``."""
        if not token:
            return None
        with self._lock:
            for user in self.users.values():
                if (
                    user.reset_token == token
                    and user.reset_expires is not None
                    and user.reset_expires > now
                ):
                    return user.model_copy()
            return None

    def update_password(self, user_id: str, password_hash: str) -> Optional[User]:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return None
            user.password = password_hash
            return user.model_copy()

    def set_reset_token(
        self, email: str, token: Optional[str], expires_at: Optional[datetime]
    ) -> Optional[User]:
        """Set or clear the reset token and its deadline together."""
        if (token is None) != (expires_at is None):
            raise ValueError("reset token and expiry must be set or cleared together")
        with self._lock:
            for user in self.users.values():
                if user.email == email:
                    user.reset_token = token
                    user.reset_expires = expires_at
                    return user.model_copy()
            return None

    def complete_reset(self, user_id: str, token: str, password_hash: str) -> bool:
        """Swap in a new password if ``token`` is still the pending one.

        Clears the token and deadline in the same step so a link works once.
        """
        with self._lock:
            user = self.users.get(user_id)
            if user is None or user.reset_token != token:
                return False
            user.password = password_hash
            user.reset_token = None
            user.reset_expires = None
            return True

    def delete_user(self, user_id: str) -> bool:
        with self._lock:
            return self.users.pop(user_id, None) is not None

    # Files and tags

    def create_file(self, record: UploadedFile) -> UploadedFile:
        with self._lock:
            self.files[record.id] = record.model_copy()
            return record.model_copy()

    def create_tag(self, tag: Tag) -> Tag:
        with self._lock:
            if any(existing.name == tag.name for existing in self.tags.values()):
                raise ConstraintViolation("tag already exists", {"field": "name"})
            self.tags[tag.id] = tag.model_copy()
            return tag.model_copy()

    def list_tags(self) -> List[Tag]:
        with self._lock:
            return [tag.model_copy() for tag in self.tags.values()]
