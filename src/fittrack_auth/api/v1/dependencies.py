"""Shared API dependencies for authentication and request metadata."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from fittrack_auth.core.settings import settings
from fittrack_auth.db.session import get_db
from fittrack_auth.models import User
from fittrack_auth.services import user_service
from fittrack_auth.services.login_throttle import LoginThrottle, get_login_throttle

# Bearer header is optional; the auth cookie is the primary carrier.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_login_throttle_dep() -> LoginThrottle:
    return get_login_throttle()


LoginThrottleDep = Annotated[LoginThrottle, Depends(get_login_throttle_dep)]


def client_ip(request: Request) -> str:
    """Return best-effort client IP.

    ``X-Forwarded-For`` is only trusted when TRUST_PROXY_HEADERS is enabled.
    """
    if settings.trust_proxy_headers:
        xff = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
        if xff:
            return xff
    return request.client.host if request.client else ""


def user_agent(request: Request) -> str:
    """Return the User-Agent header, or an empty string when absent."""
    return request.headers.get("user-agent") or ""


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    """Return the JWT from the auth cookie, falling back to a Bearer header."""
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from a JWT.

    Args:
        request: Incoming request, inspected for the auth cookie
        credentials: Optional HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If the token is missing or invalid, or the user is gone
    """
    token = extract_token(request, credentials)
    if not token:
        raise _unauthorized("Token not found")
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise _unauthorized() from err

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as err:
        raise _unauthorized() from err

    user = user_service.get_user(db, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
