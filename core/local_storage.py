# core/local_storage.py
"""
Client-side key/value storage (auth token and similar)
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    String key/value store, optionally persisted to a JSON file

    Mirrors the browser storage contract: missing keys read as None.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, initial: Optional[Dict[str, str]] = None):
        self.path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        if self.path and self.path.exists():
            self._items.update(self._load())
        if initial:
            self._items.update({str(k): str(v) for k, v in initial.items()})

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, 'r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read local storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as handle:
            json.dump(self._items, handle)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()
