"""
Document store backed by a REST service.

Each operation is a single HTTP call:

    GET    {endpoint}/items/{key}                 find
    GET    {endpoint}/findAll/{index}?{query}     find_all
    PUT    {endpoint}/items/{key}                 update
    DELETE {endpoint}/items/{key}                 remove
    DELETE {endpoint}/removeAll/{index}?{query}   remove_all
    POST   {endpoint}/bulk                        bulk

Responses are mapped back onto the same errors an `InMemoryDocumentStore`
raises, so the two can be swapped freely.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

import httpx

from .documents import KeyFunc, from_jsonable, to_jsonable, uid_key
from .errors import DoesNotExist, ProtocolError, RemoteError
from .index import Index, IndexMap
from .interfaces import DocumentStore
from .patch import Patch

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)
response_logger = logging.getLogger(__name__ + ".response")

T = TypeVar("T")


def check_status(response: httpx.Response, key: Any = None) -> Any:
    """
    Turn a response into a result or an exception.

    204 gives None, 200 gives the decoded JSON body, 404 raises
    DoesNotExist, anything else raises RemoteError.
    """
    if response.status_code == 204:
        return None
    if response.status_code == 200:
        try:
            return response.json()
        except ValueError as e:
            logger.warning("check_status: couldn't parse %r", response.text)
            raise ProtocolError("unknown response from server", response=response) from e

    logger.warning("check_status: %s %s", response.status_code, response.reason_phrase)
    if response.status_code == 404:
        raise DoesNotExist(key, response.reason_phrase or None, response=response)
    raise RemoteError(response)


def _as_flag(result: Any) -> bool:
    # 204 (None) means the server did what was asked
    return result if isinstance(result, bool) else True


class RestDocumentStore(DocumentStore[T]):
    def __init__(
        self,
        client: "Client",
        endpoint: str,
        document_type: type[T],
        index_map: IndexMap | None = None,
        *,
        key: KeyFunc = uid_key,
    ) -> None:
        logger.debug("RestDocumentStore(%r, %s)", endpoint, document_type.__name__)
        self.client = client
        self.endpoint = endpoint.rstrip("/")
        self.document_type = document_type
        self.index_map = index_map if index_map is not None else IndexMap()
        self._key = key

    async def _call(self, method: str, url: str, body: Any = None, *, key: Any = None) -> Any:
        if self.client.debug_log_requests:
            logger.debug("%s %s", method, url)
        response = await self.client.request(method, url, body)
        if self.client.debug_log_responses:
            response_logger.debug(
                "%s %s -> %s %s %r", method, url, response.status_code, dict(response.headers), response.text
            )
        result = check_status(response, key)
        logger.debug("%s %s returns %r", method, url, result)
        return result

    def _single_resource_url(self, key: Any) -> str:
        return f"{self.endpoint}/items/{quote(str(key), safe='')}"

    def _multiple_resource_url(self, op: str, index: Index, value: Any) -> str:
        return f"{self.endpoint}/{op}/{quote(index.name, safe='')}?{self.index_map.encode(index, value)}"

    def _bulk_resource_url(self) -> str:
        return f"{self.endpoint}/bulk"

    async def find(self, key: Any) -> T:
        data = await self._call("GET", self._single_resource_url(key), key=key)
        if data is None:
            raise ProtocolError(f"no document in response for {key!r}")
        return from_jsonable(self.document_type, data)

    async def find_all(self, index: Index, value: Any) -> list[T]:
        url = self._multiple_resource_url("findAll", index, value)
        data = await self._call("GET", url)
        if not isinstance(data, list):
            raise ProtocolError(f"expected a list of documents from {url}")
        return [from_jsonable(self.document_type, item) for item in data]

    async def update(self, doc: T) -> None:
        key = self._key(doc)
        await self._call("PUT", self._single_resource_url(key), to_jsonable(doc), key=key)

    async def remove(self, key: Any) -> bool:
        return _as_flag(await self._call("DELETE", self._single_resource_url(key), key=key))

    async def remove_all(self, index: Index, value: Any) -> bool:
        return _as_flag(await self._call("DELETE", self._multiple_resource_url("removeAll", index, value)))

    async def bulk(self, patch: Patch) -> int:
        await self._call("POST", self._bulk_resource_url(), patch.to_json())
        return len(patch)
