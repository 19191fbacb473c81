"""FastAPI routes for signup, login, password lifecycle, uploads and tags.

Handlers are plain ``def`` so bcrypt, SMTP and upload calls run in the
worker threadpool instead of blocking the event loop.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from edusphere.api.deps import Services, get_services
from edusphere.api.errors import envelope
from edusphere.api.schemas import (
    ChangePasswordRequest,
    GoogleSignupRequest,
    LoginRequest,
    OtpRequest,
    ResetPasswordRequest,
    ResetTokenRequest,
    SignupRequest,
    TagRequest,
)
from edusphere.core.auth import TOKEN_COOKIE, authorize, require_role
from edusphere.core.logging import LogTimer, get_logger
from edusphere.domain.user import AccountType, TokenClaims
from edusphere.services.session import LoginResult
from edusphere.services.signup import SignupForm

logger = get_logger(__name__)
router = APIRouter()


def session_response(result: LoginResult, services: Services, message: str) -> JSONResponse:
    """Return the session in the body and as an http-only cookie.

    The cookie lifetime is a transport setting and does not limit the token.
    """
    settings = services.settings
    response = JSONResponse(
        status_code=200,
        content=dict(envelope(True, message, result.user), token=result.token),
    )
    response.set_cookie(
        TOKEN_COOKIE,
        result.token,
        max_age=settings.cookie_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return response


# -----------------
# SIGNUP
# -----------------

@router.post("/otp")
def send_otp(req: OtpRequest, services: Services = Depends(get_services)):
    """Email a verification code to an unregistered address."""
    services.otp.request(req.email, req.first_name or "", req.last_name or "")
    return envelope(True, "OTP sent successfully")


@router.post("/signup", status_code=201)
def signup(req: SignupRequest, services: Services = Depends(get_services)):
    """Create an account with a verified OTP.

    Example:
        POST /api/v1/signup
        {"firstName": "A", "lastName": "B", "email": "a@b.com",
         "password": "Abcdef1!", "confirmPassword": "Abcdef1!", "otp": "123456"}
    """
    with LogTimer(logger, "signup"):
        user = services.signup.signup(SignupForm(
            first_name=req.first_name,
            last_name=req.last_name,
            email=req.email,
            password=req.password,
            confirm_password=req.confirm_password,
            account_type=req.account_type,
            otp=req.otp,
        ))
    return envelope(True, "Signup successful", user)


@router.post("/signup/google")
def google_signup(req: GoogleSignupRequest, services: Services = Depends(get_services)):
    """Sign in with a Google-verified identity, creating the account if needed."""
    result = services.signup.google_signup(
        req.first_name, req.last_name, req.email, req.account_type
    )
    return session_response(result, services, "Google login successful")


# -----------------
# LOGIN
# -----------------

@router.post("/login")
def login(req: LoginRequest, services: Services = Depends(get_services)):
    """Authenticate with email and password and start a session."""
    with LogTimer(logger, "user_authentication"):
        result = services.sessions.login(req.email, req.password)
    return session_response(result, services, "Login successful")


# -----------------
# PASSWORDS
# -----------------

@router.post("/reset-password-token")
def reset_password_token(req: ResetTokenRequest, services: Services = Depends(get_services)):
    """Email a password reset link."""
    services.password_reset.request(req.email)
    return envelope(True, "Password reset email sent successfully. Please check your inbox.")


@router.post("/reset-password")
def reset_password(req: ResetPasswordRequest, services: Services = Depends(get_services)):
    """Set a new password using the token from a reset link."""
    services.password_reset.complete(req.new_password, req.confirm_password, req.token)
    return envelope(True, "Your password has been changed successfully. Please login again.")


@router.post("/change-password")
def change_password(
    req: ChangePasswordRequest,
    claims: TokenClaims = Depends(authorize),
    services: Services = Depends(get_services),
):
    """Change the password of the signed-in user."""
    services.password_change.change(
        claims.id, req.old_password, req.new_password, req.confirm_new_password
    )
    return envelope(True, "Password changed successfully")


# -----------------
# TAGS
# -----------------

@router.post(
    "/tags",
    dependencies=[Depends(authorize), Depends(require_role(AccountType.ADMIN))],
)
def create_tag(req: TagRequest, services: Services = Depends(get_services)):
    tag = services.tags.create(req.name, req.description)
    return envelope(True, "Tag created successfully", tag.model_dump(mode="json"))


@router.get("/tags")
def list_tags(services: Services = Depends(get_services)):
    tags = [tag.model_dump(mode="json") for tag in services.tags.list_all()]
    return envelope(True, "Fetched all tags", tags)


# -----------------
# UPLOADS
# -----------------

@router.post("/imageupload")
def upload_image(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    tag: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    claims: TokenClaims = Depends(authorize),
    services: Services = Depends(get_services),
):
    """Upload an image to media storage and record its URL."""
    # One byte past the limit is enough for the size check
    content = image.file.read(services.uploads.max_bytes + 1) if image is not None else None
    filename = image.filename if image is not None else None
    record = services.uploads.upload_image(name, email, filename, content, tag)
    return envelope(True, "File uploaded", record.model_dump(mode="json"))


# -----------------
# ROLE-GATED EXAMPLES
# -----------------

@router.get(
    "/student",
    dependencies=[Depends(authorize), Depends(require_role(AccountType.STUDENT))],
)
def student_area(request: Request):
    claims: TokenClaims = request.state.user
    return envelope(True, "Welcome to the student route", claims.model_dump(mode="json", by_alias=True))


@router.get(
    "/admin",
    dependencies=[Depends(authorize), Depends(require_role(AccountType.ADMIN))],
)
def admin_area(request: Request):
    claims: TokenClaims = request.state.user
    return envelope(True, "Welcome to the admin route", claims.model_dump(mode="json", by_alias=True))
