from __future__ import annotations

from typing import Any, Protocol, TypeVar

from .index import Index
from .patch import Patch

T = TypeVar("T")


class DocumentStore(Protocol[T]):
    """
    Keyed document collection, local or remote.

    Every operation is a coroutine. `find` raises `DoesNotExist` on a miss;
    the other operations do not fail for missing keys.
    """

    async def find(self, key: Any) -> T: ...
    async def find_all(self, index: Index, value: Any) -> list[T]: ...

    async def update(self, doc: T) -> None: ...
    async def remove(self, key: Any) -> bool: ...
    async def remove_all(self, index: Index, value: Any) -> bool: ...

    async def bulk(self, patch: Patch) -> int: ...
