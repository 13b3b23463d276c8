from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Iterable, TypeVar

from .documents import Comparator, KeyFunc, key_comparator, uid_key
from .errors import DoesNotExist
from .index import Index
from .interfaces import DocumentStore
from .patch import MISSING, Patch

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryDocumentStore(DocumentStore[T]):
    """
    Documents held in a dict keyed by `key(doc)`.

    The dict's iteration order follows `comparator` whenever `sorted` is
    true. `update` with a new key clears the flag; `bulk` hands it to the
    patch engine as a hint and sets it again, since the engine always
    returns a collection in comparator order.

    All work happens synchronously; the coroutines only exist so this store
    can stand in for a remote one.
    """

    def __init__(
        self,
        key: KeyFunc = uid_key,
        comparator: Comparator | None = None,
        documents: Iterable[T] = (),
    ) -> None:
        self._key = key
        self._comparator = comparator or key_comparator(key)
        ordered = sorted(documents, key=cmp_to_key(self._comparator))
        self._data: dict[Any, T] = {key(doc): doc for doc in ordered}
        self._sorted = True

    @property
    def sorted(self) -> bool:
        return self._sorted

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    async def find(self, key: Any) -> T:
        logger.debug("find %r", key)
        try:
            return self._data[key]
        except KeyError:
            raise DoesNotExist(key) from None

    async def all(self) -> list[T]:
        return list(self._data.values())

    async def find_all(self, index: Index, value: Any) -> list[T]:
        logger.debug("find_all %s=%r", index.name, value)
        return [doc for doc in self._data.values() if index(value, doc)]

    async def update(self, doc: T) -> None:
        key = self._key(doc)
        logger.debug("update %r", key)
        old = self._data.get(key, MISSING)
        if old is MISSING or self._comparator(old, doc) != 0:
            self._sorted = False
        self._data[key] = doc

    async def remove(self, key: Any) -> bool:
        logger.debug("remove %r", key)
        if key not in self._data:
            return False
        del self._data[key]
        return True

    async def remove_all(self, index: Index, value: Any) -> bool:
        matched = [key for key, doc in self._data.items() if index(value, doc)]
        logger.debug("remove_all %s=%r: %d match(es)", index.name, value, len(matched))
        for key in matched:
            del self._data[key]
        return bool(matched)

    async def bulk(self, patch: Patch) -> int:
        logger.debug("bulk: %d entr(ies), presorted=%s", len(patch), self._sorted)
        # Only adopt the result once the engine has returned.
        self._data = patch.apply(
            self._data,
            key=self._key,
            comparator=self._comparator,
            presorted=self._sorted,
        )
        self._sorted = True
        return len(patch)
