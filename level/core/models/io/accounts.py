"""
Account I/O models.
"""

from __future__ import annotations

from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from .validation import EMAIL_PATTERN, HANDLE_PATTERN, required_text


def _check_time_zone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError("is invalid") from None
    return value


class UserCreate(BaseModel):
    """Sign up form."""

    email: str = Field(max_length=254)
    password: str = Field(min_length=6, max_length=72)
    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    handle: str = Field(max_length=20)
    time_zone: str = Field(default="UTC")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _names(cls, value):
        return required_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        value = required_text(value).lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("is invalid")
        return value

    @field_validator("handle", mode="before")
    @classmethod
    def _handle(cls, value):
        value = required_text(value)
        if not HANDLE_PATTERN.match(value):
            raise ValueError("must contain letters, numbers, and dashes only")
        return value

    @field_validator("time_zone")
    @classmethod
    def _time_zone(cls, value):
        return _check_time_zone(value)


class UserUpdate(BaseModel):
    """Profile edits; ``None`` leaves a field unchanged."""

    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    handle: Optional[str] = Field(default=None, max_length=20)
    time_zone: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _names(cls, value):
        return None if value is None else required_text(value)

    @field_validator("handle", mode="before")
    @classmethod
    def _handle(cls, value):
        if value is None:
            return None
        value = required_text(value)
        if not HANDLE_PATTERN.match(value):
            raise ValueError("must contain letters, numbers, and dashes only")
        return value

    @field_validator("time_zone")
    @classmethod
    def _time_zone(cls, value):
        return None if value is None else _check_time_zone(value)


class Credentials(BaseModel):
    email: str
    password: str
