# src/core/local_store.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from src.config import settings

logger = logging.getLogger(__name__)


class LocalStore:
    """
    Tiny string key/value file that survives restarts.

    Holds the batch file counter and, optionally, provider credentials.
    A missing or unreadable file reads as empty.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else settings.LOCAL_STORE_PATH

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable local store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def read_file_counter(self) -> int:
        saved = self.get_item(settings.FILE_COUNTER_KEY)
        try:
            return int(saved) if saved else 0
        except ValueError:
            return 0

    def next_file_number(self) -> int:
        """Claim the next batch number and persist it."""
        current = self.read_file_counter() + 1
        self.set_item(settings.FILE_COUNTER_KEY, str(current))
        return current
