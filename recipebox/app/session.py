# recipebox/app/session.py
"""
Session context: who is using the store right now.

The user is produced by an external authentication flow; the recipe store
only reads it.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from recipebox.app.config import settings
from recipebox.app.domain.errors import MalformedPersistedStateError
from recipebox.app.domain.models import User
from recipebox.app.infra.storage.base import KeyValueStorage
from recipebox.app.schemas.recipes import UserPayload

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(self, user: Optional[User] = None):
        self._user = user

    def current_user(self) -> Optional[User]:
        return self._user

    def is_authenticated(self) -> bool:
        return self._user is not None

    @classmethod
    def restore(
        cls,
        storage: KeyValueStorage,
        key: Optional[str] = None,
    ) -> SessionContext:
        """
        Rebuild a session from the stored user snapshot.

        A snapshot that cannot be parsed is removed and the session starts
        unauthenticated.
        """
        key = key or settings.SESSION_STORAGE_KEY
        try:
            user = _read_user(storage, key)
        except MalformedPersistedStateError as exc:
            logger.warning("Discarding stored session: %s", exc)
            storage.remove(key)
            return cls()

        if user is None:
            return cls()

        logger.info("Session restored: user=%s", user.id)
        return cls(user)

    # Called by the external authentication flow, never by the store

    def sign_in(
        self,
        user: User,
        storage: Optional[KeyValueStorage] = None,
        key: Optional[str] = None,
    ) -> None:
        self._user = user
        if storage is not None:
            storage.set(
                key or settings.SESSION_STORAGE_KEY,
                UserPayload.from_domain(user).model_dump_json(),
            )

    def sign_out(
        self,
        storage: Optional[KeyValueStorage] = None,
        key: Optional[str] = None,
    ) -> None:
        self._user = None
        if storage is not None:
            storage.remove(key or settings.SESSION_STORAGE_KEY)


def _read_user(storage: KeyValueStorage, key: str) -> Optional[User]:
    try:
        raw = storage.get(key)
    except UnicodeDecodeError as error:
        raise MalformedPersistedStateError(key, str(error)) from error
    if raw is None:
        return None
    try:
        return UserPayload.model_validate_json(raw).to_domain()
    except ValidationError as error:
        raise MalformedPersistedStateError(key, str(error)) from error
