from __future__ import annotations

from typing import Optional


class RecipeStoreError(Exception):
    pass


class UnauthenticatedError(RecipeStoreError):
    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class UnauthorizedError(RecipeStoreError):
    def __init__(self, recipe_id: str, user_id: str):
        super().__init__(f"User {user_id} is not allowed to modify recipe {recipe_id}")
        self.recipe_id = recipe_id
        self.user_id = user_id


class RecipeNotFoundError(RecipeStoreError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class InvalidDraftError(RecipeStoreError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Invalid recipe: {', '.join(errors)}")
        self.errors = errors


class TransportError(RecipeStoreError):
    def __init__(self, operation: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
        self.status_code = status_code


class MalformedPersistedStateError(RecipeStoreError):
    def __init__(self, key: str, reason: str):
        super().__init__(f"Malformed snapshot under {key}: {reason}")
        self.key = key
        self.reason = reason
