# src/fittrack_auth/api/v1/endpoints/auth.py
"""Authentication endpoints guarded by the failed-login throttle."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import TypeVar

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from jose import jwt

from fittrack_auth.api.v1.dependencies import (
    CurrentUserDep,
    LoginThrottleDep,
    SessionDep,
    client_ip,
    user_agent,
)
from fittrack_auth.core.clock import utcnow
from fittrack_auth.core.settings import settings
from fittrack_auth.models import User
from fittrack_auth.schemas.auth import (
    AuthStatusResponse,
    BlockedResponse,
    InvalidCredentialsResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
)
from fittrack_auth.services import user_service
from fittrack_auth.services.login_throttle import ANONYMOUS_IDENTITY, NOT_BLOCKED
from fittrack_auth.services.throttle_store import ThrottleStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

T = TypeVar("T")


def create_access_token(user: User) -> str:
    """Create a JWT access token for the given user."""
    expire = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode: dict[str, object] = {
        "sub": str(user.id),
        "username": user.username,
        "exp": expire,
    }
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def _call_throttle(operation: Callable[..., T], *args: str) -> T | None:
    """Run a throttle operation, applying the configured store-failure policy.

    Fail-closed turns a store failure into a 503; fail-open logs it and
    returns None so the login proceeds unthrottled.
    """
    try:
        return operation(*args)
    except ThrottleStoreError as err:
        if settings.throttle_fail_closed:
            logger.error("Login throttle store unavailable, rejecting login: %s", err)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Login temporarily unavailable.",
            ) from err
        logger.warning("Login throttle store unavailable, skipping throttle: %s", err)
        return None


def _blocked_response(remaining_seconds: int) -> JSONResponse:
    body = BlockedResponse(
        message=f"Too many login attempts. Please wait {remaining_seconds} seconds.",
        block_time=remaining_seconds,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=body.model_dump(),
        headers={"Retry-After": str(remaining_seconds)},
    )


@router.post(
    "/login",
    summary="Authenticate with username or email and password",
    response_model=LoginResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": InvalidCredentialsResponse},
        status.HTTP_403_FORBIDDEN: {"model": MessageResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": BlockedResponse},
    },
)
def login_user(
    payload: LoginRequest,
    request: Request,
    db: SessionDep,
    throttle: LoginThrottleDep,
) -> JSONResponse:
    """Verify credentials, enforcing the escalating failed-login block."""
    identifier = payload.identifier.strip()
    fingerprint_args = (identifier or ANONYMOUS_IDENTITY, client_ip(request), user_agent(request))

    block_status = _call_throttle(throttle.check_blocked, *fingerprint_args) or NOT_BLOCKED
    if block_status.blocked:
        return _blocked_response(block_status.remaining_seconds)

    user = user_service.authenticate(db, identifier, payload.password)
    if user is None:
        mistake = _call_throttle(throttle.record_failure, *fingerprint_args)
        failure = InvalidCredentialsResponse(mistake=mistake)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=failure.model_dump(exclude_none=True),
        )

    _call_throttle(throttle.clear_failures, *fingerprint_args)

    if not user.is_active:
        logger.info("Rejected login for inactive user id=%s", user.id)
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"message": "Your account is inactive. Please contact support."},
        )

    body = LoginResponse(
        id=user.id,
        username=user.username,
        message=f"Logged in as {user.username}",
    )
    response = JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=create_access_token(user),
        max_age=settings.access_token_max_age,
        path="/",
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite="strict",
    )
    logger.info("User id=%s logged in", user.id)
    return response


@router.post("/logout", summary="Drop the auth cookie", response_model=MessageResponse)
def logout_user() -> JSONResponse:
    response = JSONResponse(content={"message": "Logged out successfully."})
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return response


@router.get("/check-auth", summary="Validate the current token", response_model=AuthStatusResponse)
def check_auth(current_user: CurrentUserDep) -> AuthStatusResponse:
    """Return the identity bound to the presented token."""
    return AuthStatusResponse(id=current_user.id, username=current_user.username)
