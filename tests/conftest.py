"""Shared test fixtures."""

import fnmatch

import pytest


class InMemoryKeyValueStore:
    """KeyValueStore double backed by a dict. TTLs are recorded, not enforced."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.purge_calls = 0

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)
        self.ttls.pop(key, None)

    async def keys(self, pattern: str) -> list[str]:
        return sorted(k for k in self.data if fnmatch.fnmatchcase(k, pattern))

    async def purge_expired(self) -> int:
        self.purge_calls += 1
        return 0

    async def is_healthy(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    def expire(self, key: str) -> None:
        """Simulate the key's TTL running out."""
        self.data.pop(key, None)
        self.ttls.pop(key, None)


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    """Create an in-memory key-value store."""
    return InMemoryKeyValueStore()
