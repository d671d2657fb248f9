"""Relays search parameters to the upstream backend."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from .config import FORWARD_MAX_REDIRECTS, FORWARD_TIMEOUT, TARGET_SEARCH_URL
from .utils import QueryValue, _build_async_client

logger = logging.getLogger(__name__)


class ForwardingError(Exception):
    """The upstream search request failed or answered with a non-2xx status."""


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    body: bytes
    media_type: str = "application/json"


class SearchForwarder:
    def __init__(
        self,
        url: str = TARGET_SEARCH_URL,
        timeout: float = FORWARD_TIMEOUT,
        max_redirects: int = FORWARD_MAX_REDIRECTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_redirects = max_redirects
        self._transport = transport

    async def forward(self, params: Mapping[str, QueryValue]) -> UpstreamResponse:
        """GET the upstream URL with ``params``.

        A 2xx answer (after redirects) comes back untouched; anything else raises
        :class:`ForwardingError` so its body never reaches the caller.
        """
        try:
            async with _build_async_client(
                self.timeout, self._transport, max_redirects=self.max_redirects
            ) as client:
                response = await client.get(self.url, params=dict(params))
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ForwardingError(
                f"upstream {self.url} answered {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ForwardingError(f"upstream request to {self.url} failed: {exc!r}") from exc

        media_type = response.headers.get("content-type", "application/json")
        logger.debug("Upstream answered %s (%d bytes)", response.status_code, len(response.content))
        return UpstreamResponse(response.status_code, response.content, media_type)
