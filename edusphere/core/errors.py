"""Service-layer exceptions mapped to HTTP responses.

Each class carries an HTTP ``status_code`` and a stable ``error_code``.
The families follow the account flows:

- ValidationError (400/422): malformed or missing input, recoverable
- ConflictError (409): the account already exists
- AuthenticationError (401): wrong password or OTP
- ExpiredError (410): OTP or reset link no longer valid
- NotFoundError (404): no such account
- DependencyError (500): hashing, email, cache or upload failures
"""
from typing import Optional


class ServiceError(Exception):
    """Base class for service-layer exceptions."""

    status_code: int = 400
    error_code: str = "validation_error"
    default_message: str = "Request could not be processed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        detail: Optional[dict] = None,
    ) -> None:
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail or {}


class ValidationError(ServiceError):
    status_code = 400
    error_code = "validation_error"


class ConflictError(ServiceError):
    status_code = 409
    error_code = "conflict"
    default_message = "Resource already exists"


class AuthenticationError(ServiceError):
    status_code = 401
    error_code = "unauthorized"
    default_message = "Authentication failed"


class ExpiredError(ServiceError):
    status_code = 410
    error_code = "expired"
    default_message = "This request has expired"


class NotFoundError(ServiceError):
    status_code = 404
    error_code = "not_found"
    default_message = "Not found"


class DependencyError(ServiceError):
    status_code = 500
    error_code = "server_error"
    default_message = "Internal server error"


# Validation

class MissingFields(ValidationError):
    error_code = "missing_fields"
    default_message = "Please fill all the required fields"


class EmailRequired(ValidationError):
    error_code = "email_required"
    default_message = "Email is required"


class InvalidEmail(ValidationError):
    error_code = "invalid_email"
    default_message = "Invalid email format"


class OtpRequired(ValidationError):
    error_code = "otp_required"
    default_message = "Please enter OTP"


class WeakPassword(ValidationError):
    error_code = "weak_password"
    default_message = (
        "Password must be at least 8 characters long and include uppercase, "
        "lowercase, number and special character"
    )


class PasswordMismatch(ValidationError):
    error_code = "password_mismatch"
    default_message = "Password and confirm password do not match"


class InvalidAccountType(ValidationError):
    status_code = 422
    error_code = "invalid_account_type"
    default_message = "Account type must be one of Admin, Student, Instructor"


class InvalidUpload(ValidationError):
    error_code = "invalid_upload"
    default_message = "Please enter valid data"


# Conflicts

class AccountExists(ConflictError):
    error_code = "account_exists"
    default_message = "User already exists, please login"


class TagExists(ConflictError):
    error_code = "tag_exists"
    default_message = "This tag already exists"


# Authentication

class WrongPassword(AuthenticationError):
    error_code = "wrong_password"
    default_message = "Wrong password"


class OldPasswordIncorrect(AuthenticationError):
    error_code = "old_password_incorrect"
    default_message = "Old password is incorrect"


class OtpMismatch(AuthenticationError):
    error_code = "otp_mismatch"
    default_message = "Invalid OTP"


class TokenMissing(AuthenticationError):
    status_code = 400
    error_code = "token_missing"
    default_message = "Token missing"


class TokenInvalid(AuthenticationError):
    status_code = 400
    error_code = "token_invalid"
    default_message = "Token verification failed"


class AccessDenied(ServiceError):
    status_code = 400
    error_code = "access_denied"
    default_message = "Access denied"


# Expiry

class OtpExpiredOrMissing(ExpiredError):
    error_code = "otp_expired"
    default_message = "OTP expired or not found"


class InvalidOrExpiredLink(ExpiredError):
    status_code = 400
    error_code = "invalid_or_expired_link"
    default_message = "Invalid or expired password reset link"


# Not found

class UserNotFound(NotFoundError):
    error_code = "user_not_found"
    default_message = "User not found, please signup"


class NoAccountFound(NotFoundError):
    status_code = 400
    error_code = "no_account_found"
    default_message = "No account found with this email"


# Dependencies

class HashingFailed(DependencyError):
    error_code = "hashing_failed"
    default_message = "Password hashing failed"


class EmailDeliveryFailed(DependencyError):
    error_code = "email_delivery_failed"
    default_message = "Failed to send email. Please try again later."


class SignupFailed(DependencyError):
    error_code = "signup_failed"
    default_message = (
        "Signup failed: could not send confirmation email. Your account has "
        "been removed. Please try signing up again."
    )


class CacheUnavailable(DependencyError):
    error_code = "cache_unavailable"
    default_message = "Verification service temporarily unavailable"


class UploadFailed(DependencyError):
    status_code = 400
    error_code = "upload_failed"
    default_message = "File upload failed"


class InternalError(DependencyError):
    error_code = "internal_error"
    default_message = "Internal server error"
