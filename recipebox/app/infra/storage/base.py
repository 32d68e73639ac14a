# recipebox/app/infra/storage/base.py
"""
Abstract base class for durable key-value storage.
This interface allows easy swapping between storage backends (files, memory, etc.)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract interface for snapshot storage addressed by a fixed key.

    Implementations:
    - JsonFileStorage: one JSON file per key in a directory
    - InMemoryStorage: dict-backed, for tests and ephemeral sessions
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the serialized snapshot stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if nothing is stored
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the snapshot stored under a key.

        Args:
            key: Storage key
            value: Serialized snapshot
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Delete the snapshot stored under a key. Missing keys are ignored.

        Args:
            key: Storage key
        """
        pass


class InMemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
