"""
In-memory key-value store for development and tests.

Why: Run the whole portal offline without Postgres. Values go through a JSON
round-trip on write and are deep-copied on read, so callers never alias stored
data and non-JSON values fail early, the same way the hosted store would.
"""
from __future__ import annotations

import copy
import json
from typing import Any, Dict


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.loads(json.dumps(value))

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        return [copy.deepcopy(self._data[k]) for k in sorted(self._data) if k.startswith(prefix)]

    def keys(self) -> list[str]:
        """Return all stored keys in order (inspection helper for tests and debugging)."""
        return sorted(self._data)


__all__ = ["InMemoryKeyValueStore"]
