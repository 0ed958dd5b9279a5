"""Authentication schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request body."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login response."""

    success: bool
    message: str
    role: str = Field(default="")


class CurrentUserResponse(BaseModel):
    id: int
    username: str
    display_name: str
    role: str
    vendor_id: Optional[int] = None

    model_config = {"from_attributes": True}
