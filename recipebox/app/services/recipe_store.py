# recipebox/app/services/recipe_store.py
"""
Recipe store: the in-memory recipe cache and its CRUD operations.

Every mutation checks the session user against the recipe owner before
touching the remote collection or the local snapshot.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional
from uuid import uuid4

from pydantic import ValidationError

from recipebox.app.config import settings
from recipebox.app.domain.errors import (
    InvalidDraftError,
    MalformedPersistedStateError,
    RecipeNotFoundError,
    RecipeStoreError,
    TransportError,
    UnauthenticatedError,
    UnauthorizedError,
)
from recipebox.app.domain.models import (
    ErrorKind,
    OperationResult,
    Recipe,
    RecipeDraft,
    User,
)
from recipebox.app.infra.api.base import RecipeGateway
from recipebox.app.infra.storage.base import KeyValueStorage
from recipebox.app.schemas.recipes import RecipeList, RecipeResponse
from recipebox.app.session import SessionContext
from recipebox.app.services.ids import normalize_id

logger = logging.getLogger(__name__)

MODE_REMOTE = "remote"
MODE_LOCAL = "local"

_ERROR_KINDS: tuple[tuple[type[RecipeStoreError], ErrorKind], ...] = (
    (UnauthenticatedError, ErrorKind.UNAUTHENTICATED),
    (UnauthorizedError, ErrorKind.UNAUTHORIZED),
    (RecipeNotFoundError, ErrorKind.NOT_FOUND),
    (InvalidDraftError, ErrorKind.INVALID_DRAFT),
    (TransportError, ErrorKind.TRANSPORT_FAILURE),
    (MalformedPersistedStateError, ErrorKind.MALFORMED_PERSISTED_STATE),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _error_kind(exc: RecipeStoreError) -> ErrorKind:
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return ErrorKind.TRANSPORT_FAILURE


class RecipeStore:
    """
    Cache of recipes kept in sync with a remote collection or a local snapshot.

    Modes:
    - remote: a gateway is given; every mutation goes through it and the
      server response replaces the cached entry. An optional storage only
      mirrors the confirmed set.
    - local: no gateway; the cache is the source of truth, hydrated from
      storage at construction and written back after every mutation.

    Public operations never raise; they return an OperationResult and
    record the failure message in `error`.
    """

    def __init__(
        self,
        session: SessionContext,
        gateway: Optional[RecipeGateway] = None,
        storage: Optional[KeyValueStorage] = None,
        storage_key: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session = session
        self._gateway = gateway
        self._storage = storage
        self._storage_key = storage_key or settings.RECIPES_STORAGE_KEY
        self._clock = clock
        self._recipes: dict[str, Recipe] = {}
        self._commit_lock = asyncio.Lock()

        self.is_loading = False
        self.error: Optional[str] = None

        if self.mode == MODE_LOCAL and self._storage is not None:
            self._hydrate()

    # ------------------------------------------------------------------
    # State and derived views
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return MODE_REMOTE if self._gateway is not None else MODE_LOCAL

    @property
    def recipes(self) -> tuple[Recipe, ...]:
        return tuple(self._recipes.values())

    @property
    def owned_recipes(self) -> list[Recipe]:
        user = self._session.current_user()
        if user is None:
            return []
        return [recipe for recipe in self._recipes.values() if recipe.owner_id == user.id]

    @property
    def favorite_recipes(self) -> list[Recipe]:
        return [recipe for recipe in self.owned_recipes if recipe.is_favorite]

    def get_by_id(self, recipe_id: Any) -> Optional[Recipe]:
        key = normalize_id(recipe_id)
        if key is None:
            return None
        return self._recipes.get(key)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load(self) -> OperationResult:
        """Replace the whole cache with the remote collection or the stored snapshot."""

        async def _load() -> int:
            if self._gateway is not None:
                recipes = await self._gateway.list_recipes()
            else:
                recipes = await asyncio.to_thread(self._read_snapshot_or_discard)
            self._recipes = self._index(recipes)
            await self._mirror()
            logger.info("Recipes loaded: mode=%s, count=%d", self.mode, len(self._recipes))
            return len(self._recipes)

        return await self._run("Failed to load recipes", _load)

    async def create(self, draft: RecipeDraft) -> OperationResult:
        """Create a recipe owned by the session user; data is the new id."""

        async def _create() -> str:
            user = self._require_user()
            self._validate(draft)

            if self._gateway is not None:
                recipe = await self._gateway.create_recipe(draft, user.id)
                key = normalize_id(recipe.id)
                if key is None:
                    raise TransportError("create recipe", "response without id")
                self._recipes[key] = recipe
                await self._mirror()
            else:
                now = self._clock()
                recipe = Recipe(
                    id=uuid4().hex,
                    title=draft.title,
                    description=draft.description,
                    ingredients=list(draft.ingredients),
                    instructions=list(draft.instructions),
                    prep_time=draft.prep_time,
                    cook_time=draft.cook_time,
                    servings=draft.servings,
                    image_url=draft.image_url,
                    owner_id=user.id,
                    is_favorite=False,
                    created_at=now,
                    updated_at=now,
                )
                await self._commit_put(recipe.id, recipe)

            logger.info("Recipe created: id=%s, owner=%s", recipe.id, user.id)
            return recipe.id

        return await self._run("Failed to create recipe", _create)

    async def update(self, recipe_id: Any, draft: RecipeDraft) -> OperationResult:
        """Merge draft fields onto an owned recipe; data is the stored result."""

        async def _update() -> Recipe:
            key, existing = self._authorize(recipe_id)
            self._validate(draft)

            merged = replace(
                existing,
                title=draft.title,
                description=draft.description,
                ingredients=list(draft.ingredients),
                instructions=list(draft.instructions),
                prep_time=draft.prep_time,
                cook_time=draft.cook_time,
                servings=draft.servings,
                image_url=draft.image_url,
                updated_at=self._fresh_timestamp(existing),
            )

            if self._gateway is not None:
                result = await self._gateway.update_recipe(merged)
                self._replace(key, result)
                await self._mirror()
            else:
                result = merged
                await self._commit_put(key, result)

            logger.info("Recipe updated: id=%s", result.id)
            return result

        return await self._run("Failed to update recipe", _update)

    async def delete(self, recipe_id: Any) -> OperationResult:
        """Remove an owned recipe; data is the removed id."""

        async def _delete() -> str:
            key, existing = self._authorize(recipe_id)

            if self._gateway is not None:
                await self._gateway.delete_recipe(existing.id)
                self._recipes.pop(key, None)
                await self._mirror()
            else:
                await self._commit_remove(key)

            logger.info("Recipe deleted: id=%s", existing.id)
            return existing.id

        return await self._run("Failed to delete recipe", _delete)

    async def toggle_favorite(self, recipe_id: Any) -> OperationResult:
        """Flip the favorite flag of an owned recipe; data is the stored result."""

        async def _toggle() -> Recipe:
            key, existing = self._authorize(recipe_id)
            new_value = not existing.is_favorite

            if self._gateway is not None:
                result = await self._gateway.set_favorite(existing.id, new_value)
                self._replace(key, result)
                await self._mirror()
            else:
                result = replace(
                    existing,
                    is_favorite=new_value,
                    updated_at=self._fresh_timestamp(existing),
                )
                await self._commit_put(key, result)

            logger.info("Favorite toggled: id=%s, is_favorite=%s", result.id, result.is_favorite)
            return result

        return await self._run("Failed to update favorite", _toggle)

    async def aclose(self) -> None:
        """Release the gateway's connections."""
        if self._gateway is not None:
            await self._gateway.aclose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run(
        self,
        failure_message: str,
        operation: Callable[[], Awaitable[Any]],
    ) -> OperationResult:
        self.is_loading = True
        self.error = None
        try:
            return OperationResult.ok(await operation())
        except RecipeStoreError as exc:
            kind = _error_kind(exc)
            self.error = f"{failure_message}: {exc}"
            logger.warning("%s (%s): %s", failure_message, kind.value, exc)
            return OperationResult.fail(self.error, kind)
        except Exception:
            logger.exception(failure_message)
            self.error = f"{failure_message}: unexpected error"
            return OperationResult.fail(self.error, ErrorKind.TRANSPORT_FAILURE)
        finally:
            self.is_loading = False

    def _require_user(self) -> User:
        user = self._session.current_user()
        if user is None:
            raise UnauthenticatedError()
        return user

    def _authorize(self, recipe_id: Any) -> tuple[str, Recipe]:
        key = normalize_id(recipe_id)
        existing = self._recipes.get(key) if key is not None else None
        if existing is None:
            raise RecipeNotFoundError(str(recipe_id))

        user = self._require_user()
        if not existing.is_owned_by(user):
            raise UnauthorizedError(existing.id, user.id)
        return key, existing

    @staticmethod
    def _validate(draft: RecipeDraft) -> None:
        errors = draft.validate()
        if errors:
            raise InvalidDraftError(errors)

    def _fresh_timestamp(self, existing: Recipe) -> datetime:
        return max(self._clock(), existing.created_at)

    def _replace(self, key: str, recipe: Recipe) -> None:
        # A concurrent delete may have removed the entry while awaiting the server
        if key in self._recipes:
            self._recipes[key] = recipe

    @staticmethod
    def _index(recipes: Iterable[Recipe]) -> dict[str, Recipe]:
        indexed: dict[str, Recipe] = {}
        for recipe in recipes:
            key = normalize_id(recipe.id)
            if key is None:
                logger.warning("Skipping recipe without id: title=%s", recipe.title)
                continue
            indexed[key] = recipe
        return indexed

    # -- snapshot persistence --

    def _serialize(self, recipes: Iterable[Recipe]) -> str:
        items = [RecipeResponse.from_domain(recipe) for recipe in recipes]
        return RecipeList.dump_json(items).decode("utf-8")

    def _read_snapshot(self) -> list[Recipe]:
        if self._storage is None:
            return []
        try:
            raw = self._storage.get(self._storage_key)
        except UnicodeDecodeError as error:
            raise MalformedPersistedStateError(self._storage_key, str(error)) from error
        except OSError as error:
            raise TransportError("read snapshot", str(error)) from error
        if raw is None:
            return []
        try:
            return [item.to_domain() for item in RecipeList.validate_json(raw)]
        except ValidationError as error:
            raise MalformedPersistedStateError(self._storage_key, str(error)) from error

    def _read_snapshot_or_discard(self) -> list[Recipe]:
        try:
            return self._read_snapshot()
        except MalformedPersistedStateError:
            logger.warning("Discarding malformed recipe snapshot: key=%s", self._storage_key)
            self._storage.remove(self._storage_key)
            self._recipes = {}
            raise

    def _hydrate(self) -> None:
        try:
            self._recipes = self._index(self._read_snapshot_or_discard())
        except MalformedPersistedStateError as exc:
            self.error = f"Stored recipes were discarded: {exc}"
            return
        except TransportError as exc:
            logger.warning("Could not read stored recipes: %s", exc)
            self.error = f"Failed to load recipes: {exc}"
            return
        logger.info("Recipes hydrated from storage: count=%d", len(self._recipes))

    async def _write_snapshot(self, recipes: dict[str, Recipe]) -> None:
        payload = self._serialize(recipes.values())
        try:
            await asyncio.to_thread(self._storage.set, self._storage_key, payload)
        except OSError as error:
            raise TransportError("write snapshot", str(error)) from error

    async def _commit(self, change: Callable[[dict[str, Recipe]], None]) -> None:
        """Persist the new set first; the cache only changes once the write succeeded."""
        # Copy, write and swap happen under one lock so overlapping mutations
        # of different ids never overwrite each other
        async with self._commit_lock:
            updated = dict(self._recipes)
            change(updated)
            if self._storage is not None:
                await self._write_snapshot(updated)
            self._recipes = updated

    async def _commit_put(self, key: str, recipe: Recipe) -> None:
        def _put(recipes: dict[str, Recipe]) -> None:
            recipes[key] = recipe

        await self._commit(_put)

    async def _commit_remove(self, key: str) -> None:
        def _remove(recipes: dict[str, Recipe]) -> None:
            recipes.pop(key, None)

        await self._commit(_remove)

    async def _mirror(self) -> None:
        if self._gateway is None or self._storage is None:
            return
        try:
            await self._write_snapshot(self._recipes)
        except TransportError as exc:
            logger.warning("Could not mirror recipes to storage: %s", exc)
