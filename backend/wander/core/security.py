import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from wander.core.errors import ForbiddenError, ServiceNotConfiguredError, UnauthenticatedError
from wander.core.settings import Settings, get_settings

# Set up logging
logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Caller identity taken from the auth provider's session token"""
    id: UUID
    email: Optional[str] = None
    role: Optional[str] = None


def create_access_token(
    user_id: UUID,
    settings: Settings,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a token shaped like the auth provider's session tokens"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": str(user_id), "exp": expire, "role": "authenticated"}
    if email:
        to_encode["email"] = email
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> AuthenticatedUser:
    """Decode and verify a session token, raising UnauthenticatedError on any problem"""
    try:
        if settings.JWT_AUDIENCE:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
            )
        else:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                options={"verify_aud": False},
            )
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise UnauthenticatedError()

    subject = payload.get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        logger.warning("Token subject is not a user id")
        raise UnauthenticatedError()

    return AuthenticatedUser(id=user_id, email=payload.get("email"), role=payload.get("role"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedUser:
    """Resolve the caller from the bearer token; no database lookup"""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    return decode_access_token(credentials.credentials, settings)


async def require_service_role(
    service_key: Optional[str] = Header(default=None, alias="X-Service-Role-Key"),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> None:
    """Gate for provisioning endpoints called by trusted backends only"""
    if not settings.SERVICE_ROLE_KEY:
        logger.error("SERVICE_ROLE_KEY is not configured")
        raise ServiceNotConfiguredError("Service role key is not configured")

    supplied = service_key or (credentials.credentials if credentials else None)
    if not supplied:
        raise UnauthenticatedError()
    if not hmac.compare_digest(supplied.encode(), settings.SERVICE_ROLE_KEY.encode()):
        logger.warning("Rejected request with an invalid service role key")
        raise ForbiddenError("Invalid service role key")
