"""Session tokens and the authorization gate.

Sessions are stateless HS256 JWTs carrying ``{id, email, accountType}``.
The gate accepts a token from the JSON body, the ``token`` cookie or an
``Authorization: Bearer`` header, in that order, and reports every
verification failure the same way.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Request
import jwt

from edusphere.core.config import settings
from edusphere.core.errors import AccessDenied, InternalError, TokenInvalid, TokenMissing
from edusphere.core.logging import get_logger
from edusphere.domain.user import AccountType, TokenClaims, User

logger = get_logger(__name__)

# JWT Configuration from settings
SECRET_KEY = settings.jwt_secret_key
ALGORITHM = settings.jwt_algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes

TOKEN_COOKIE = "token"


def create_access_token(
    user: User,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a session token for a user.

    Args:
        user: Authenticated user
        expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Encoded JWT token
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "id": user.id,
        "email": user.email,
        "accountType": user.account_type,
        "exp": expire,
        "iat": now,
    }

    token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

    logger.info(
        "Access token created",
        extra={"user_id": user.id}
    )

    return token


def decode_token(token: str) -> TokenClaims:
    """Decode and validate a session token.

    Raises:
        TokenInvalid: Expired, malformed or wrongly signed token
    """
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "id"]},
        )
        return TokenClaims.model_validate(payload)

    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token attempted: {type(e).__name__}")
        raise TokenInvalid()

    except ValueError:
        logger.warning("Token payload missing required claims")
        raise TokenInvalid()


async def _token_from_body(request: Request) -> Optional[str]:
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("token"), str):
        return body["token"] or None
    return None


async def extract_token(request: Request) -> Optional[str]:
    """Find the session token: body field, then cookie, then bearer header."""
    token = await _token_from_body(request)
    if token:
        return token

    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token

    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return None


async def authorize(request: Request) -> TokenClaims:
    """FastAPI dependency that verifies the session token.

    The decoded claims are stored on ``request.state.user`` for later gates.

    Example:
        >>> @router.post("/change-password")
        >>> def change(claims: TokenClaims = Depends(authorize)):
        ...     return {"user": claims.email}
    """
    token = await extract_token(request)
    if not token:
        raise TokenMissing()

    claims = decode_token(token)
    request.state.user = claims

    logger.debug("User authenticated", extra={"user_id": claims.id})
    return claims


def require_role(role: AccountType):
    """Dependency factory for role checks after ``authorize``.

    Must be listed after ``authorize`` in the route dependencies; running
    it without verified claims is a server bug, not a client error.

    Example:
        >>> @router.get("/admin", dependencies=[Depends(authorize), Depends(require_role(AccountType.ADMIN))])
    """
    required = AccountType(role).value

    async def role_checker(request: Request) -> TokenClaims:
        claims = getattr(request.state, "user", None)
        if not isinstance(claims, TokenClaims):
            logger.error(f"Role gate '{required}' reached without authorization")
            raise InternalError()

        if claims.account_type != required:
            logger.warning(
                f"Access denied: {required} only",
                extra={"user_id": claims.id}
            )
            raise AccessDenied(f"Access denied: {required} only")
        return claims

    return role_checker
