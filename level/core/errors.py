"""Error types for the Level domain.

Services raise these; the GraphQL layer turns ``ValidationError`` into a
mutation payload (``success: false`` plus field errors) and the others into
GraphQL errors, while the REST exception handlers map them to status codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class FieldError:
    """A single validation failure on one input attribute."""

    attribute: str
    message: str


class LevelError(Exception):
    """Base error for all Level domain exceptions."""


class NotFoundError(LevelError):
    """Raised when a record does not exist or the actor is not allowed to see it."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"{resource} not found")


class UnauthorizedError(LevelError):
    """Raised when credentials are missing, expired or invalid."""

    def __init__(self, message: str = "You must be logged in") -> None:
        super().__init__(message)


class ForbiddenError(LevelError):
    """Raised when the actor can see a resource but may not change it."""

    def __init__(self, message: str = "You are not authorized to perform this action") -> None:
        super().__init__(message)


class ValidationError(LevelError):
    """Raised with one or more attribute-level errors."""

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors: List[FieldError] = list(errors)
        summary = ", ".join(f"{e.attribute} {e.message}" for e in self.errors)
        super().__init__(summary or "invalid input")

    @classmethod
    def single(cls, attribute: str, message: str) -> "ValidationError":
        return cls([FieldError(attribute, message)])
