# recipebox/app/domain/models.py
"""
Domain models for the recipe cache.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Failure categories reported by store operations."""
    UNAUTHENTICATED = "UNAUTHENTICATED"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_DRAFT = "INVALID_DRAFT"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    MALFORMED_PERSISTED_STATE = "MALFORMED_PERSISTED_STATE"


@dataclass(frozen=True)
class User:
    """Identity issued by the external authentication flow."""
    id: str
    username: str
    email: str


@dataclass
class RecipeDraft:
    """Caller-supplied payload for create and update."""
    title: str
    description: str = ""
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    prep_time: float = 0
    cook_time: float = 0
    servings: int = 1
    image_url: Optional[str] = None

    def validate(self) -> list[str]:
        """Validate the draft and return list of errors."""
        errors = []

        if not self.title or not self.title.strip():
            errors.append("title is required")
        if self.prep_time < 0:
            errors.append("prep_time must not be negative")
        if self.cook_time < 0:
            errors.append("cook_time must not be negative")
        if isinstance(self.servings, bool) or not isinstance(self.servings, int) or self.servings < 1:
            errors.append("servings must be a positive integer")

        return errors


@dataclass
class Recipe:
    """
    A user-owned recipe as held in the cache.
    owner_id never changes after creation.
    """
    id: str
    title: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    description: str = ""
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    prep_time: float = 0
    cook_time: float = 0
    servings: int = 1
    image_url: Optional[str] = None
    is_favorite: bool = False

    def is_owned_by(self, user: Optional[User]) -> bool:
        return user is not None and self.owner_id == user.id


@dataclass
class OperationResult:
    """Structured outcome of a store operation."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None) -> OperationResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind) -> OperationResult:
        return cls(success=False, error=error, error_kind=kind)
