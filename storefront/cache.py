"""Durable key-value storage for cart and wishlist contents.

Values are JSON documents keyed by name, the way a browser keeps them in
localStorage. Reads are best-effort: a missing or unreadable entry is the
caller's default, and an unreadable entry is dropped.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

CART_KEY = "cartItems"
WISHLIST_KEY = "wishlistItems"
PRODUCTS_KEY = "cachedProducts"
TOKEN_KEY = "token"


class LocalCache:
    """In-memory store; also the base for the file-backed one."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_raw(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def load(self, key: str, default: Any = None) -> Any:
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("Dropping unreadable cache entry %r", key)
            self.remove(key)
            return default

    def save(self, key: str, value: Any) -> None:
        self.set_raw(key, json.dumps(value, default=str))

    def _flush(self) -> None:
        pass


class FileCache(LocalCache):
    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._data = {k: v for k, v in data.items() if isinstance(v, str)}
            except (OSError, ValueError):
                logger.error("Cache file %s is unreadable, starting empty", self.path)

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(self._data, f)
        os.replace(tmp, self.path)
