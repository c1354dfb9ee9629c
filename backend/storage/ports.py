"""
Key-value store port used by identity and teaching services.

Keep this small and framework-agnostic so tests can supply simple fakes. The
host store offers no multi-key transactions; callers sequence writes
explicitly and accept last-writer-wins on each key.
"""
from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Minimal async interface to a flat JSON key-value namespace.

    Intent:
        Stand in for a relational database: records and denormalized index
        lists are JSON values stored under derived string keys.

    Behavior:
        - `get` returns None when the key is absent.
        - `set` replaces the whole value (no partial updates).
        - `delete` on an absent key is a no-op.
        - `get_by_prefix` returns the values of every key starting with
          `prefix`, ordered by key.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def get_by_prefix(self, prefix: str) -> list[Any]: ...


__all__ = ["KeyValueStore"]
