"""
HTTP client for Solid POD documents.

This module provides the document-level interface used by the ACL store, the
app-permission gate and the route translator:
- retrieve_json: GET a JSON-LD document
- store_json: PUT a JSON-LD document
- list_container: URLs an LDP container contains

Authentication is not handled here: pass an already authenticated
httpx.AsyncClient when the POD requires it.

Example:
    >>> async with PodClient(settings) as pod:
    ...     doc = await pod.retrieve_json("https://alice.example/viade/routes/r1.jsonld")

Invariants:
    - HTTP status >= 400 raises StoreError (404 raises NotFoundError)
    - Transport failures raise PodConnectionError
    - Nothing is retried here
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .config import Settings
from .errors import NotFoundError, PodConnectionError, StoreError, StoreWriteError

logger = logging.getLogger(__name__)

JSONLD = "application/ld+json"


class PodClient:
    """Async client for reading and writing POD resources.

    Args:
        settings: Viade settings (request_timeout)
        client: Optional httpx client; the PodClient closes it only if it
            created it
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.settings.request_timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client if owned."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> PodClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise PodConnectionError(f"Failed to reach {url}: {e}", url=url) from e

        if response.status_code == 404:
            raise NotFoundError(f"Resource not found: {url}", url=url)
        if response.status_code >= 400:
            error_cls = StoreWriteError if method in ("PUT", "POST", "PATCH") else StoreError
            raise error_cls(
                f"{method} {url} failed with status {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    async def retrieve_json(self, url: str) -> Any:
        """Fetch and parse a JSON-LD document.

        Args:
            url: Document URL

        Returns:
            Parsed JSON

        Raises:
            NotFoundError: If the document does not exist
            StoreError: If the POD fails or the body is not JSON
        """
        response = await self._request("GET", url, headers={"Accept": JSONLD})
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON at {url}: {e}", url=url) from e

    async def store_json(self, url: str, document: Any) -> None:
        """Write a JSON-LD document, replacing any existing one.

        Raises:
            StoreWriteError: If the POD rejects the write
        """
        await self._request(
            "PUT",
            url,
            content=json.dumps(document),
            headers={"Content-Type": JSONLD},
        )
        logger.debug(f"Stored document at {url}")

    async def list_container(self, url: str) -> list[str]:
        """List the resource URLs an LDP container contains.

        Args:
            url: Container URL (trailing slash)

        Returns:
            Absolute URLs of contained resources, in document order
        """
        document = await self.retrieve_json(url)
        nodes = document if isinstance(document, list) else document.get("@graph", [document])

        base = httpx.URL(url)
        urls: list[str] = []
        for node in nodes:
            if not isinstance(node, dict):
                continue
            for key, value in node.items():
                if key.rsplit("#", 1)[-1].rsplit(":", 1)[-1] != "contains":
                    continue
                for item in value if isinstance(value, list) else [value]:
                    ref = item.get("@id") if isinstance(item, dict) else item
                    if isinstance(ref, str):
                        urls.append(str(base.join(ref)))
        return urls
