"""
Validation helpers shared by the I/O schemas.

Pydantic reports failures with its own wording; ``validate`` converts them into
the short attribute-level messages clients display next to form fields
("can't be blank", "has invalid format", ...).
"""

from __future__ import annotations

import re
from typing import Any, Dict, Type, TypeVar

import pydantic
from pydantic import BaseModel

from level.core.errors import FieldError, ValidationError

ModelType = TypeVar("ModelType", bound=BaseModel)

HANDLE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$", re.IGNORECASE)
SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _message(error: Dict[str, Any]) -> str:
    kind = error.get("type")
    ctx = error.get("ctx") or {}
    if kind == "value_error":
        return str(ctx.get("error", error.get("msg", "is invalid")))
    if kind == "missing":
        return "can't be blank"
    if kind == "string_too_long":
        return f"should be at most {ctx.get('max_length')} character(s)"
    if kind == "string_too_short":
        return f"should be at least {ctx.get('min_length')} character(s)"
    if kind == "greater_than_equal":
        return f"must be greater than or equal to {ctx.get('ge')}"
    if kind == "less_than_equal":
        return f"must be less than or equal to {ctx.get('le')}"
    return "is invalid"


def validate(model: Type[ModelType], **data: Any) -> ModelType:
    """Build ``model`` from keyword data or raise a domain ``ValidationError``."""
    try:
        return model(**data)
    except pydantic.ValidationError as exc:
        errors = []
        for error in exc.errors():
            loc = error.get("loc") or ("base",)
            errors.append(FieldError(attribute=str(loc[0]), message=_message(error)))
        raise ValidationError(errors) from None


def required_text(value: Any) -> str:
    """Strip a string and reject blank values."""
    if value is None:
        raise ValueError("can't be blank")
    value = str(value).strip()
    if not value:
        raise ValueError("can't be blank")
    return value
