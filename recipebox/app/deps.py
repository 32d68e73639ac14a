# recipebox/app/deps.py
from __future__ import annotations

from typing import Optional

from recipebox.app.config import Settings, get_settings
from recipebox.app.infra.api.base import RecipeGateway
from recipebox.app.infra.api.http_gateway import HttpRecipeGateway
from recipebox.app.infra.storage.base import KeyValueStorage
from recipebox.app.infra.storage.json_file import JsonFileStorage
from recipebox.app.services.recipe_store import RecipeStore
from recipebox.app.session import SessionContext


def get_storage(settings: Optional[Settings] = None) -> KeyValueStorage:
    settings = settings or get_settings()
    return JsonFileStorage(settings.STORAGE_DIR)


def get_gateway(settings: Optional[Settings] = None) -> Optional[RecipeGateway]:
    """Remote gateway when a base URL is configured, otherwise None (local-only mode)."""
    settings = settings or get_settings()
    if settings.RECIPES_API_BASE_URL is None:
        return None
    return HttpRecipeGateway(
        str(settings.RECIPES_API_BASE_URL),
        collection_path=settings.RECIPES_API_PATH,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def build_recipe_store(
    session: SessionContext,
    settings: Optional[Settings] = None,
    gateway: Optional[RecipeGateway] = None,
    storage: Optional[KeyValueStorage] = None,
) -> RecipeStore:
    settings = settings or get_settings()
    return RecipeStore(
        session,
        gateway=gateway if gateway is not None else get_gateway(settings),
        storage=storage if storage is not None else get_storage(settings),
        storage_key=settings.RECIPES_STORAGE_KEY,
    )
