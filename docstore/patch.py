"""
Bulk patch engine.

A `Patch` is an ordered list of `(key, operation)` pairs. Applying it to a
keyed collection yields a new collection in comparator order:

    patch = Patch().merge(1, {"b": Replace("pizza")}).delete(3)
    data = patch.apply(data, key=uid_key, presorted=True)

Operations never mutate the documents they are applied to, and `apply` never
mutates the collection it is given; a failing patch leaves the caller's state
exactly as it was.
"""

from __future__ import annotations

import copy
import dataclasses
import heapq
from functools import cmp_to_key
from operator import itemgetter
from typing import Any, Callable, Iterable, Iterator, Mapping

from pydantic import BaseModel

from .documents import Comparator, KeyFunc, from_jsonable, key_comparator, to_jsonable
from .errors import PatchError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Stands for "no value": an absent key or field, or the result of a delete.
MISSING: Any = _Missing()


class Operation:
    op = ""

    def apply(self, current: Any) -> Any:
        raise NotImplementedError

    def to_json(self) -> dict[str, Any]:
        return {"op": self.op}


@dataclasses.dataclass(frozen=True)
class Replace(Operation):
    value: Any
    op = "replace"

    def apply(self, current: Any) -> Any:
        return self.value

    def to_json(self) -> dict[str, Any]:
        return {"op": self.op, "value": to_jsonable(self.value)}


@dataclasses.dataclass(frozen=True)
class Delete(Operation):
    op = "delete"

    def apply(self, current: Any) -> Any:
        return MISSING


@dataclasses.dataclass(frozen=True)
class Merge(Operation):
    """
    Patch some fields of a document, leaving the others alone.

    Plain values in `fields` are shorthand for `Replace(value)`.
    """

    fields: Mapping[str, Operation]
    op = "merge"

    def __post_init__(self) -> None:
        fields = {name: _as_operation(value) for name, value in self.fields.items()}
        object.__setattr__(self, "fields", fields)

    def apply(self, current: Any) -> Any:
        if current is MISSING or current is None:
            raise PatchError("cannot merge fields into a missing value")
        changes: dict[str, Any] = {}
        deletions: list[str] = []
        for name, operation in self.fields.items():
            value = operation.apply(_get_field(current, name))
            if value is MISSING:
                deletions.append(name)
            else:
                changes[name] = value
        return _rebuild(current, changes, deletions)

    def to_json(self) -> dict[str, Any]:
        return {"op": self.op, "fields": {name: op.to_json() for name, op in self.fields.items()}}


def _as_operation(value: Any) -> Operation:
    return value if isinstance(value, Operation) else Replace(value)


def _get_field(doc: Any, name: str) -> Any:
    if isinstance(doc, Mapping):
        return doc.get(name, MISSING)
    return getattr(doc, name, MISSING)


def _rebuild(doc: Any, changes: dict[str, Any], deletions: list[str]) -> Any:
    if isinstance(doc, Mapping):
        merged = dict(doc)
        merged.update(changes)
        for name in deletions:
            merged.pop(name, None)
        return merged

    if deletions:
        if isinstance(doc, BaseModel) or dataclasses.is_dataclass(doc):
            raise PatchError(f"cannot delete fields {deletions} of {type(doc).__name__}")

    if isinstance(doc, BaseModel):
        return doc.model_copy(update=changes)
    if dataclasses.is_dataclass(doc) and not isinstance(doc, type):
        try:
            return dataclasses.replace(doc, **changes)
        except TypeError as e:
            raise PatchError(str(e)) from e

    merged = copy.copy(doc)
    for name, value in changes.items():
        setattr(merged, name, value)
    for name in deletions:
        try:
            delattr(merged, name)
        except AttributeError as e:
            raise PatchError(f"cannot delete field {name!r}") from e
    return merged


def operation_from_json(data: Any) -> Operation:
    kind = data.get("op") if isinstance(data, Mapping) else None
    if kind == Replace.op:
        return Replace(data.get("value"))
    if kind == Delete.op:
        return Delete()
    if kind == Merge.op:
        fields = data.get("fields")
        if not isinstance(fields, Mapping):
            raise PatchError("merge operation needs a 'fields' object")
        return Merge({str(name): operation_from_json(raw) for name, raw in fields.items()})
    raise PatchError(f"unknown patch operation {kind!r}")


class Patch:
    def __init__(self, entries: Mapping[Any, Operation] | Iterable[tuple[Any, Operation]] | None = None):
        self._entries: list[tuple[Any, Operation]] = []
        if isinstance(entries, Mapping):
            entries = entries.items()
        for key, operation in entries or ():
            self._add(key, operation)

    def _add(self, key: Any, operation: Operation) -> "Patch":
        if not isinstance(operation, Operation):
            raise PatchError(f"not a patch operation: {operation!r}")
        self._entries.append((key, operation))
        return self

    def replace(self, key: Any, value: Any) -> "Patch":
        return self._add(key, Replace(value))

    def merge(self, key: Any, fields: Mapping[str, Any]) -> "Patch":
        return self._add(key, Merge(fields))

    def delete(self, key: Any) -> "Patch":
        return self._add(key, Delete())

    @property
    def entries(self) -> tuple[tuple[Any, Operation], ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[Any, Operation]]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Patch):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Patch({self._entries!r})"

    def apply(
        self,
        collection: Mapping[Any, Any],
        *,
        key: KeyFunc | None = None,
        comparator: Comparator | None = None,
        presorted: bool = False,
    ) -> dict[Any, Any]:
        """
        Apply the entries in order and return the new collection.

        `presorted` says the iteration order of `collection` already follows
        `comparator`; only the touched entries are then re-positioned, after
        a linear check that the rest really is in order. The result is in
        comparator order either way. Without a comparator, documents are
        ordered by `key`, and failing that by collection key.
        """
        result = dict(collection)
        touched: set[Any] = set()
        for entry_key, operation in self._entries:
            value = operation.apply(result.get(entry_key, MISSING))
            if value is MISSING:
                result.pop(entry_key, None)
                touched.discard(entry_key)
                continue
            if key is not None:
                try:
                    value_key = key(value)
                except (KeyError, AttributeError) as e:
                    raise PatchError(f"patched value for {entry_key!r} has no key") from e
                if value_key != entry_key:
                    raise PatchError(f"document key {value_key!r} does not match patch key {entry_key!r}")
            result[entry_key] = value
            touched.add(entry_key)

        if comparator is None and key is not None:
            comparator = key_comparator(key)
        item_key = _item_sort_key(comparator)

        if not presorted:
            return dict(sorted(result.items(), key=item_key))
        untouched = [item for item in result.items() if item[0] not in touched]
        if not _in_order(untouched, item_key):
            # stale hint
            return dict(sorted(result.items(), key=item_key))
        moved = sorted((item for item in result.items() if item[0] in touched), key=item_key)
        return dict(heapq.merge(untouched, moved, key=item_key))

    def to_json(self) -> dict[str, Any]:
        return {"op": "patch", "entries": [[key, operation.to_json()] for key, operation in self._entries]}

    @classmethod
    def from_json(cls, data: Any, document_type: type | None = None) -> "Patch":
        """
        Decode the wire form produced by `to_json`.

        With `document_type`, whole-document replacements are rebuilt as
        instances of that type.
        """
        if not isinstance(data, Mapping) or data.get("op") != "patch":
            raise PatchError("not a patch document")
        raw_entries = data.get("entries")
        if not isinstance(raw_entries, list):
            raise PatchError("patch needs an 'entries' list")

        patch = cls()
        for pair in raw_entries:
            if not isinstance(pair, list) or len(pair) != 2:
                raise PatchError(f"malformed patch entry: {pair!r}")
            key, raw = pair
            operation = operation_from_json(raw)
            if document_type is not None and isinstance(operation, Replace):
                operation = Replace(from_jsonable(document_type, operation.value))
            patch._add(key, operation)
        return patch


def _in_order(items: list[tuple[Any, Any]], item_key: Callable[[tuple[Any, Any]], Any]) -> bool:
    keys = [item_key(item) for item in items]
    return not any(later < earlier for earlier, later in zip(keys, keys[1:]))


def _item_sort_key(comparator: Comparator | None) -> Callable[[tuple[Any, Any]], Any]:
    if comparator is None:
        return itemgetter(0)
    wrapped = cmp_to_key(comparator)
    return lambda item: wrapped(item[1])
