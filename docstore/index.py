"""
Named indexes and the registry that maps them onto query strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import quote, urlencode

from .errors import IndexNotMapped

Predicate = Callable[[Any, Any], bool]
QueryEncoder = Callable[[Any], str]


@dataclass(frozen=True)
class Index:
    """
    A named predicate `(value, item) -> bool`.

    The name doubles as the wire key for remote stores, so two indexes must
    only share a name when they mean the same thing.
    """

    name: str
    predicate: Predicate

    def __call__(self, value: Any, item: Any) -> bool:
        return bool(self.predicate(value, item))

    @classmethod
    def of(cls, func: Predicate, name: str | None = None) -> "Index":
        return cls(name=name or func.__name__, predicate=func)


def as_index(func: Predicate) -> Index:
    """Decorator: `@as_index def by_a(value, item): ...`"""
    return Index.of(func)


def _field_value(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def field_index(field: str, name: str | None = None) -> Index:
    def predicate(value: Any, item: Any) -> bool:
        return _field_value(item, field) == value

    return Index(name=name or f"by_{field}", predicate=predicate)


class IndexMap:
    def __init__(self) -> None:
        self._encoders: dict[str, QueryEncoder] = {}

    def add_encoder(self, index: Index, encoder: QueryEncoder) -> "IndexMap":
        self._encoders[index.name] = encoder
        return self

    def add_simple_field(self, index: Index, field_name: str) -> "IndexMap":
        """
        Map `index` onto a single query parameter, `field_name=value`.

        Returns self so registrations can be chained.
        """
        return self.add_encoder(index, lambda value: urlencode({field_name: value}, quote_via=quote))

    def encode(self, index: Index, value: Any) -> str:
        encoder = self._encoders.get(index.name)
        if encoder is None:
            raise IndexNotMapped(index.name)
        return encoder(value)

    def __contains__(self, index: object) -> bool:
        name = index.name if isinstance(index, Index) else index
        return name in self._encoders

    def __len__(self) -> int:
        return len(self._encoders)
