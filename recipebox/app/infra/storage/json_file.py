# recipebox/app/infra/storage/json_file.py
"""
File-backed storage: each key is kept as <key>.json inside a directory.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from recipebox.app.config import STORAGE_KEY_PATTERN
from recipebox.app.infra.storage.base import KeyValueStorage

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(STORAGE_KEY_PATTERN)


class JsonFileStorage(KeyValueStorage):
    """
    Durable storage for JSON snapshots on the local filesystem.

    Writes go through a temp file and os.replace, so a crash mid-write
    leaves the previous snapshot intact.
    """

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)
        logger.info("JsonFileStorage initialized: dir=%s", self.base_dir)

    def _path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)
        logger.debug("Snapshot written: key=%s, bytes=%d", key, len(value))

    def remove(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)
