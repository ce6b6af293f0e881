"""
Post, reply, reaction and nudge I/O models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .validation import required_text


class BodyInput(BaseModel):
    """Body of a post or reply."""

    body: str

    @field_validator("body", mode="before")
    @classmethod
    def _body(cls, value):
        return required_text(value)


class ReactionInput(BaseModel):
    value: str = Field(max_length=16)

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, value):
        return required_text(value)


class NudgeInput(BaseModel):
    minute: int = Field(ge=0, le=1439)


class SearchInput(BaseModel):
    query: str

    @field_validator("query", mode="before")
    @classmethod
    def _query(cls, value):
        return required_text(value)
