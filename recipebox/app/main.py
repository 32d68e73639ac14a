# recipebox/app/main.py
from __future__ import annotations

import logging
import sys
from typing import Optional

from recipebox.app.config import Settings, get_settings
from recipebox.app.deps import build_recipe_store, get_storage
from recipebox.app.services.recipe_store import MODE_REMOTE, RecipeStore
from recipebox.app.session import SessionContext

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    # Logging simples no stdout
    logging.basicConfig(
        level=(level or get_settings().LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


async def bootstrap(settings: Optional[Settings] = None) -> tuple[SessionContext, RecipeStore]:
    """
    Restore the stored session and build a ready-to-use store.

    In remote mode the collection is fetched once; a failed fetch leaves the
    store empty with `error` set rather than raising.
    """
    settings = settings or get_settings()
    storage = get_storage(settings)
    session = SessionContext.restore(storage, key=settings.SESSION_STORAGE_KEY)
    store = build_recipe_store(session, settings=settings, storage=storage)

    if store.mode == MODE_REMOTE:
        await store.load()

    logger.info(
        "Recipe store ready: env=%s, mode=%s, authenticated=%s, recipes=%d",
        settings.APP_ENV,
        store.mode,
        session.is_authenticated(),
        len(store.recipes),
    )
    return session, store
