"""
Key/value string storage for the client.

`JsonFileStorage` is the durable store (survives restarts, like browser
local storage); `MemoryStorage` lives as long as the process (session
storage). Both hold strings only; callers encode JSON themselves.
"""

import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MemoryStorage:
    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class JsonFileStorage(MemoryStorage):
    """
    Durable storage persisted as a single JSON object on disk.

    The file is read once at construction and rewritten after every change.
    An unreadable file is logged and treated as empty.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = os.path.expanduser(path)
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    self._items = {str(k): str(v) for k, v in loaded.items()}
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")

    def _flush(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._items, f)

    def set_item(self, key: str, value: str) -> None:
        super().set_item(key, value)
        self._flush()

    def remove_item(self, key: str) -> None:
        super().remove_item(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()
