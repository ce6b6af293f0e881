"""
Space and group I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .validation import SLUG_PATTERN, required_text


def _slug(value):
    value = required_text(value).lower()
    if not SLUG_PATTERN.match(value):
        raise ValueError("must contain letters, numbers, and dashes only")
    return value


class SpaceCreate(BaseModel):
    name: str = Field(max_length=255)
    slug: str = Field(max_length=50)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return required_text(value)

    @field_validator("slug", mode="before")
    @classmethod
    def _slug(cls, value):
        return _slug(value)


class SpaceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=50)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return None if value is None else required_text(value)

    @field_validator("slug", mode="before")
    @classmethod
    def _slug(cls, value):
        return None if value is None else _slug(value)


class GroupCreate(BaseModel):
    name: str = Field(max_length=255)
    description: Optional[str] = None
    is_private: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return required_text(value)


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    is_private: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return None if value is None else required_text(value)
