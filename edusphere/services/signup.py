"""Account creation with email OTP verification or a Google identity.

A new account exists only if its welcome email went out: when the send
fails, the user and its profile are removed again. This is a compensating
action, not a transaction; a crash between the two steps can leave an
orphaned record.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from edusphere.core.config import Settings
from edusphere.core.errors import (
    AccountExists,
    InvalidAccountType,
    InvalidEmail,
    MissingFields,
    OtpRequired,
    PasswordMismatch,
    SignupFailed,
    WeakPassword,
)
from edusphere.core.logging import LogTimer, get_logger, redact_email
from edusphere.core.security import generate_random_password, hash_password
from edusphere.domain.user import AccountType, Profile, User
from edusphere.infrastructure.mailer import Mailer
from edusphere.infrastructure.store import ConstraintViolation, CredentialStore
from edusphere.services.otp import OtpService
from edusphere.services.session import LoginResult, SessionService
from edusphere.services.templates import provisioned_account_email, welcome_email
from edusphere.utils.validators import is_strong_password, is_valid_email

logger = get_logger(__name__)


@dataclass
class SignupForm:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    account_type: Optional[str] = None
    otp: Optional[str] = None


def _parse_account_type(value: Optional[str]) -> AccountType:
    if not value:
        return AccountType.STUDENT
    try:
        return AccountType(value)
    except ValueError:
        raise InvalidAccountType()


class SignupService:
    def __init__(
        self,
        store: CredentialStore,
        otp: OtpService,
        sessions: SessionService,
        mailer: Mailer,
        settings: Settings,
    ):
        self.store = store
        self.otp = otp
        self.sessions = sessions
        self.mailer = mailer
        self.login_url = f"{settings.frontend_base_url}/login"

    def _create_account(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        account_type: AccountType,
    ) -> User:
        profile = self.store.create_profile(Profile.placeholder(first_name, last_name))
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password_hash,
            account_type=account_type,
            profile_id=profile.id,
        )
        try:
            return self.store.create_user(user)
        except ConstraintViolation:
            # Lost a race with a concurrent signup for the same address
            self.store.delete_profile(profile.id)
            raise AccountExists()

    def _rollback(self, user: User) -> None:
        self.store.delete_user(user.id)
        self.store.delete_profile(user.profile_id)
        logger.warning("Signup rolled back", extra={"user_id": user.id})

    def signup(self, form: SignupForm) -> Dict[str, Any]:
        """Create an account after verifying the emailed OTP.

        Checks run in a fixed order and the first failure wins.

        Returns:
            Public view of the new user (no password)

        Raises:
            MissingFields, OtpRequired, PasswordMismatch: 400
            InvalidEmail, WeakPassword, InvalidAccountType: 422
            AccountExists: 409
            OtpExpiredOrMissing: 410
            OtpMismatch: 401
            HashingFailed, SignupFailed: 500
        """
        if not all([form.first_name, form.last_name, form.email, form.password, form.confirm_password]):
            raise MissingFields()
        if not form.otp:
            raise OtpRequired()
        if not is_valid_email(form.email):
            raise InvalidEmail(status_code=422)
        if not is_strong_password(form.password):
            raise WeakPassword(status_code=422)
        if form.password != form.confirm_password:
            raise PasswordMismatch()
        account_type = _parse_account_type(form.account_type)
        if self.store.get_user_by_email(form.email) is not None:
            raise AccountExists()

        self.otp.verify(form.email, form.otp)

        with LogTimer(logger, "password_hash"):
            password_hash = hash_password(form.password)

        user = self._create_account(
            form.first_name, form.last_name, form.email, password_hash, account_type
        )
        # Already verified above; the code may have expired during the hash
        self.otp.discard(form.email)

        subject, html = welcome_email(user.first_name, user.last_name, self.login_url)
        if not self.mailer.send(user.email, subject, html):
            self._rollback(user)
            raise SignupFailed()

        logger.info("Signup successful", extra={"user_id": user.id})
        return user.public_view(self.store.get_profile(user.profile_id))

    def google_signup(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        account_type: Optional[str] = None,
    ) -> LoginResult:
        """Sign in with a Google-verified address, creating the account on first use.

        New accounts get a random password that is emailed once.
        """
        if not first_name or not last_name or not email:
            raise MissingFields()
        if not is_valid_email(email):
            raise InvalidEmail()

        if self.store.get_user_by_email(email) is not None:
            return self.sessions.login_verified_identity(email)

        role = _parse_account_type(account_type)
        password = generate_random_password()
        password_hash = hash_password(password)

        user = self._create_account(first_name, last_name, email, password_hash, role)

        subject, html = provisioned_account_email(first_name, last_name, password, self.login_url)
        if not self.mailer.send(email, subject, html):
            self._rollback(user)
            raise SignupFailed()

        logger.info("Google signup successful", extra={"email": redact_email(email)})
        return self.sessions.login_verified_identity(email)
