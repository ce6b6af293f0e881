"""
Request and response bodies of the REST endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SignUpRequest(BaseModel):
    email: str = Field(..., description="Login email, case-insensitive")
    password: str = Field(..., description="Between 6 and 72 characters")
    first_name: str
    last_name: str
    handle: str = Field(..., description="Letters, numbers and dashes, up to 20 characters")
    time_zone: Optional[str] = Field(default=None, description="IANA time zone name, defaults to UTC")


class LoginRequest(BaseModel):
    email: str
    password: str


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    handle: str
    time_zone: str
    inserted_at: datetime


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


class SignUpResponse(TokenResponse):
    user: UserRead
