"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    identifier: str = Field("", max_length=255, description="Username or email address")
    password: str = Field(..., max_length=4096, description="Plain-text password")


class LoginResponse(BaseModel):
    """Response returned after a successful login."""

    id: int = Field(..., description="Identifier of the authenticated user")
    username: str = Field(..., description="Username of the authenticated user")
    message: str = Field(..., description="Human-readable confirmation")

    model_config = ConfigDict(from_attributes=True)


class AuthStatusResponse(BaseModel):
    """Response returned when the presented token is valid."""

    id: int
    username: str
    message: str = "Token is valid"


class BlockedResponse(BaseModel):
    """Body of the 429 response sent while a fingerprint is blocked."""

    success: bool = False
    message: str
    block_time: int = Field(..., gt=0, description="Seconds until the block lapses")


class InvalidCredentialsResponse(BaseModel):
    """Body of the 401 response sent after a failed verification."""

    success: bool = False
    message: str = "Invalid credentials"
    mistake: int | None = Field(
        None,
        ge=1,
        description="Failed attempts recorded so far; omitted when the throttle is unavailable",
    )


class MessageResponse(BaseModel):
    """Plain message payload."""

    message: str
