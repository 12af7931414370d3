"""HTTP transport for the TMDB API.

The transport never raises for network problems: connection errors,
timeouts and non-2xx statuses come back as an unsuccessful
``TransportResponse`` carrying a message, and the metadata client decides
how to classify them.
"""

from __future__ import annotations

import asyncio
import logging
import time
import types
from dataclasses import dataclass
from typing import Protocol

import aiohttp
from typing_extensions import Self

from reelfinder.shared.constants import Timeout
from reelfinder.shared.logging import log_api_call, redact_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of one HTTP exchange.

    Attributes:
        success: True for a completed exchange with a 2xx status
        body: Response body (empty when the server sent none)
        error: Failure message when ``success`` is False
        status: HTTP status, None when no response was received
    """

    success: bool
    body: bytes = b""
    error: str | None = None
    status: int | None = None

    @classmethod
    def ok(cls, body: bytes, status: int = 200) -> TransportResponse:
        return cls(success=True, body=body, status=status)

    @classmethod
    def failure(cls, error: str, status: int | None = None) -> TransportResponse:
        return cls(success=False, error=error, status=status)


class Transport(Protocol):
    """Async HTTP GET boundary."""

    async def get(self, url: str) -> TransportResponse: ...

    async def get_bytes(self, url: str) -> TransportResponse: ...


class AiohttpTransport:
    """Transport backed by a lazily created ``aiohttp.ClientSession``.

    Args:
        timeout: Total request timeout in seconds
        session: Optional pre-built session (the caller keeps ownership)
    """

    def __init__(
        self,
        timeout: float = Timeout.TMDB,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            async with self._session_lock:
                if self._session is None or self._session.closed:
                    self._session = aiohttp.ClientSession(timeout=self.timeout)
                    self._owns_session = True
                    logger.debug("Created aiohttp session")
        return self._session

    async def get(self, url: str) -> TransportResponse:
        """GET a JSON endpoint."""
        return await self._fetch(url, accept="application/json")

    async def get_bytes(self, url: str) -> TransportResponse:
        """GET binary content such as a poster image."""
        return await self._fetch(url, accept="*/*")

    async def _fetch(self, url: str, accept: str) -> TransportResponse:
        session = await self._get_session()
        started = time.perf_counter()

        try:
            async with session.get(url, headers={"Accept": accept}) as response:
                body = await response.read()
                duration_ms = (time.perf_counter() - started) * 1000
                log_api_call(logger, url, status_code=response.status, duration_ms=duration_ms)

                if not 200 <= response.status < 300:
                    return TransportResponse.failure(
                        f"HTTP {response.status}: {response.reason}",
                        status=response.status,
                    )
                return TransportResponse.ok(body, status=response.status)

        except asyncio.TimeoutError:
            logger.warning("Request to %s timed out", redact_url(url))
            return TransportResponse.failure("Request timeout")
        except aiohttp.ClientError as e:
            logger.warning("Request to %s failed: %s", redact_url(url), e)
            return TransportResponse.failure(str(e) or type(e).__name__)

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed aiohttp session")
        self._session = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.close()


__all__ = [
    "AiohttpTransport",
    "Transport",
    "TransportResponse",
]
