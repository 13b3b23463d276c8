"""
Helpers for treating application values as documents.

A store only needs a key function; remote stores additionally need to turn
documents into JSON data and back.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Mapping

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from .errors import ProtocolError

KeyFunc = Callable[[Any], Any]
Comparator = Callable[[Any, Any], int]


def uid_key(doc: Any) -> Any:
    if isinstance(doc, Mapping):
        return doc["uid"]
    return doc.uid


def key_comparator(key: KeyFunc) -> Comparator:
    def compare(a: Any, b: Any) -> int:
        ka, kb = key(a), key(b)
        return (ka > kb) - (ka < kb)

    return compare


def to_jsonable(doc: Any) -> Any:
    to_json = getattr(doc, "to_json", None)
    if callable(to_json):
        return to_json()
    return to_jsonable_python(doc)


@lru_cache(maxsize=None)
def _adapter_for(document_type: type) -> TypeAdapter:
    return TypeAdapter(document_type)


def from_jsonable(document_type: type, data: Any) -> Any:
    """
    Rebuild a document of `document_type` from decoded JSON.

    A `from_json` classmethod on the type wins; anything pydantic can validate
    (models, dataclasses, dicts) works without one.
    """
    from_json = getattr(document_type, "from_json", None)
    if callable(from_json):
        return from_json(data)
    try:
        return _adapter_for(document_type).validate_python(data)
    except ValidationError as e:
        raise ProtocolError(f"cannot build {document_type.__name__} from server data: {e}") from e
