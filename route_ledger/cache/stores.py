"""Key-value stores backing the dashboard cache"""

from typing import Dict, Optional, Protocol


class KeyValueStore(Protocol):
    """
    Asynchronous string key-value store.

    Implementations raise CacheReadError / CacheWriteError on I/O failure;
    the dashboard cache catches both.
    """

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process store for tests and single-session use"""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
