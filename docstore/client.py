from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx
from dotenv import load_dotenv

from .documents import KeyFunc, uid_key
from .index import IndexMap
from .rest_store import RestDocumentStore
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Keyword arguments for httpx, per HTTP method
DEFAULT_OPTIONS: dict[str, dict[str, Any]] = {
    "GET": {"follow_redirects": True},
    "DELETE": {},
    "POST": {},
    "PUT": {},
}

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
}


class Client:
    """
    Base URL, headers and request options shared by a set of remote stores.

        client = Client("https://example.com/api", Client.get_bearer_auth_header(token))
        users = client.get_store("/users", User, INDEX_MAP)

    Stores read `headers` and `options` at request time, so `update_headers`
    affects every store already handed out.
    """

    @staticmethod
    def get_bearer_auth_header(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        options: Mapping[str, Mapping[str, Any]] | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        debug_log_requests: bool = True,
        debug_log_responses: bool = False,
    ) -> None:
        logger.debug("Client(%r)", base_url)
        self.base_url = base_url.rstrip("/")
        self.headers: dict[str, str] = {**DEFAULT_HEADERS, **(headers or {})}

        options = {method.upper(): dict(opts) for method, opts in (options or {}).items()}
        self.options: dict[str, dict[str, Any]] = {}
        for method in {*DEFAULT_OPTIONS, *options}:
            method_options = {**DEFAULT_OPTIONS.get(method, {}), **options.get(method, {})}
            self.options[method] = method_options

        self.debug_log_requests = debug_log_requests
        self.debug_log_responses = debug_log_responses
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "Client":
        if settings is None:
            load_dotenv("local.env")
            settings = get_settings()

        headers = cls.get_bearer_auth_header(settings.auth_token) if settings.auth_token else {}
        options = {method: {"timeout": settings.timeout} for method in DEFAULT_OPTIONS}
        return cls(
            settings.base_url,
            headers,
            options,
            debug_log_requests=settings.debug_log_requests,
            debug_log_responses=settings.debug_log_responses,
            **kwargs,
        )

    def update_headers(self, headers: Mapping[str, str]) -> None:
        """Merge `headers` into the defaults sent with every request."""
        self.headers.update(headers)

    async def request(self, method: str, url: str, body: Any = None) -> httpx.Response:
        """
        Send one request to `base_url + url`.

        `body` is JSON-encoded when given.
        """
        method = method.upper()
        content = None if body is None else json.dumps(body)

        async with httpx.AsyncClient(transport=self._transport) as http:
            return await http.request(
                method,
                self.base_url + url,
                headers=dict(self.headers),
                content=content,
                **self.options.get(method, {}),
            )

    def get_store(
        self,
        endpoint: str,
        document_type: type,
        index_map: IndexMap | None = None,
        *,
        key: KeyFunc = uid_key,
    ) -> RestDocumentStore:
        return RestDocumentStore(self, endpoint, document_type, index_map, key=key)
