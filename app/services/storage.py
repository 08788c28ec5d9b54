"""
GymTracker Pro - Key/Value Storage.

Synchronous string storage used by the local auth backend, mirroring the
browser ``localStorage`` contract (``get_item``/``set_item``/``remove_item``).
Storage failures are not caught here; they propagate to the caller.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Abstract string key/value storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, overwriting any prior value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""


class MemoryStorage(KeyValueStorage):
    """In-process storage. Lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class JsonFileStorage(KeyValueStorage):
    """
    Storage backed by a single JSON object on disk.

    Every write rewrites the whole file, so each ``set_item`` is one
    synchronous write of the full document.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.warning(f"Corrupt storage file {self.path}: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} does not hold an object - ignoring")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class RedisStorage(KeyValueStorage):
    """
    Storage backed by Redis strings.

    Keys are namespaced with ``prefix``. The client is created lazily from
    ``redis_url`` unless one is injected.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379/0", prefix: str = "gymtracker:", client=None):
        self._redis_url = redis_url
        self.prefix = prefix
        self._client = client

    @property
    def client(self):
        """Lazy-load the Redis client."""
        if self._client is None:
            import redis
            self._client = redis.Redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get_item(self, key: str) -> Optional[str]:
        value = self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.client.delete(self._key(key))


def create_storage(backend: str, *, path: str = "", redis_url: str = "", prefix: str = "gymtracker:") -> KeyValueStorage:
    """
    Build the storage named by ``backend``.

    Args:
        backend: ``memory``, ``file`` or ``redis``.
        path: JSON file path for the ``file`` backend.
        redis_url: Connection URL for the ``redis`` backend.
        prefix: Key prefix for the ``redis`` backend.

    Raises:
        ValueError: Unknown backend name.
    """
    name = backend.lower()
    if name == "memory":
        return MemoryStorage()
    if name == "file":
        return JsonFileStorage(path)
    if name == "redis":
        return RedisStorage(redis_url, prefix=prefix)
    raise ValueError(f"Unknown storage backend: {backend}")
