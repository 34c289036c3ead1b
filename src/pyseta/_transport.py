"""HTTP transport for the upstream SETA feeds."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from pyseta._constants import USER_AGENT
from pyseta.exceptions import SetaTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the feed modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str) -> Any: ...


class HttpTransport:
    """GET-and-decode transport on a shared aiohttp session."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_json(self, url: str) -> Any:
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                body = await resp.read()
                status = resp.status
        except asyncio.TimeoutError as exc:
            raise SetaTransportError(f"Request to {url} timed out", url=url) from exc
        except aiohttp.ClientError as exc:
            raise SetaTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        if status != 200:
            snippet = body[:200].decode("utf-8", errors="replace")
            raise SetaTransportError(f"HTTP {status} from {url}: {snippet}", status_code=status, url=url)

        try:
            return json.loads(body.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise SetaTransportError(f"Response from {url} is not valid UTF-8: {exc}", url=url) from exc
        except ValueError as exc:
            snippet = body[:200].decode("utf-8", errors="replace")
            raise SetaTransportError(f"Invalid JSON from {url}: {snippet}", url=url) from exc
