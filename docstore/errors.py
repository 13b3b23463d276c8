"""
Exceptions raised by document stores.

Both backends raise the same types so callers can branch on them without
knowing whether a store is local or remote.
"""

from __future__ import annotations

from typing import Any


class DocStoreError(Exception):
    """Base error for the project."""


class DoesNotExist(DocStoreError, KeyError):
    """Raised when a lookup misses, locally or with a 404 from the server."""

    def __init__(self, key: Any = None, detail: str | None = None, *, response: Any = None) -> None:
        self.key = key
        self.detail = detail
        self.response = response
        message = detail or "document does not exist"
        if key is not None:
            message = f"{message}: {key!r}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class ConfigurationError(DocStoreError):
    """Raised for setup defects, such as an index with no wire encoder."""


class IndexNotMapped(ConfigurationError):
    def __init__(self, index_name: str) -> None:
        self.index_name = index_name
        super().__init__(f"no query encoder registered for index {index_name!r}")


class ProtocolError(DocStoreError):
    """Raised when the server answers in a way the wire protocol does not allow."""

    def __init__(self, message: str, *, response: Any = None) -> None:
        self.response = response
        super().__init__(message)


class RemoteError(DocStoreError):
    """
    Raised for any non-2xx, non-404 response.

    The original response is kept on `.response` for inspection.
    """

    def __init__(self, response: Any) -> None:
        self.response = response
        self.status_code = getattr(response, "status_code", None)
        reason = getattr(response, "reason_phrase", "") or "remote error"
        super().__init__(f"{self.status_code} {reason}")


class PatchError(DocStoreError):
    """Raised when a patch cannot be applied or decoded."""
