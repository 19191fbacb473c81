"""Domain models for accounts and authentication."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


AVATAR_URL = "https://api.dicebear.com/7.x/initials/svg?seed={first_name} {last_name}"

# Fields that never leave the service in a response body
PRIVATE_USER_FIELDS = {"password", "reset_token", "reset_expires"}


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountType(str, Enum):
    """Account roles checked by role gates."""
    ADMIN = "Admin"
    STUDENT = "Student"
    INSTRUCTOR = "Instructor"


class Profile(BaseModel):
    """Personal details attached to a user at signup.

    Every field except the generated avatar starts out empty.
    """
    id: str = Field(default_factory=new_id)
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    image: Optional[str] = None
    about: Optional[str] = None
    contact_no: Optional[str] = None
    profession: Optional[str] = None

    @classmethod
    def placeholder(cls, first_name: str, last_name: str) -> "Profile":
        return cls(image=AVATAR_URL.format(first_name=first_name, last_name=last_name))


class User(BaseModel):
    """Account identity record.

    Attributes:
        id: Unique identifier for the user
        first_name: Given name
        last_name: Family name
        email: Login address, unique and compared as stored
        password: bcrypt hash, never plaintext
        account_type: Role used by role gates
        profile_id: Reference to the user's Profile
        reset_token: Pending password reset token, set together with reset_expires
        reset_expires: Deadline for reset_token
        created_at: Account creation timestamp
    """
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=new_id)
    first_name: str
    last_name: str
    email: str
    password: str
    account_type: AccountType = AccountType.STUDENT
    profile_id: str
    reset_token: Optional[str] = None
    reset_expires: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    def public_view(self, profile: Optional[Profile] = None) -> Dict[str, Any]:
        """Serializable view with credentials stripped."""
        data = self.model_dump(mode="json", exclude=PRIVATE_USER_FIELDS)
        data["profile"] = profile.model_dump(mode="json") if profile else None
        return data


class UploadedFile(BaseModel):
    """Metadata of an image stored in the media service."""
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    image_url: str
    tag: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Tag(BaseModel):
    """Catalog tag."""
    id: str = Field(default_factory=new_id)
    name: str
    description: str


class TokenClaims(BaseModel):
    """Session token payload.

    Attributes:
        id: User ID
        email: User email
        account_type: Role at the time the token was issued
        exp: Token expiration time
        iat: Token issued at time
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    account_type: str = Field(alias="accountType")
    exp: datetime
    iat: Optional[datetime] = None
