"""Shared fakes for governance storage tests."""

from typing import List, Optional, Tuple

import pytest

from home_advisory.storage.kv import InMemoryKeyValueStore, StorageError


class RecordingStore(InMemoryKeyValueStore):
    """In-memory store that records every call as (op, key)."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.calls: List[Tuple[str, str]] = []

    def get(self, key: str) -> Optional[str]:
        self.calls.append(("get", key))
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        self.calls.append(("set", key))
        super().set(key, value)

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        super().delete(key)


class UnavailableStore:
    """A store whose every operation fails, like storage disabled in a browser."""

    def get(self, key: str) -> Optional[str]:
        raise StorageError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise StorageError("storage unavailable")

    def delete(self, key: str) -> None:
        raise StorageError("storage unavailable")


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def unavailable_store():
    return UnavailableStore()
