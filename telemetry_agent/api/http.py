"""
Telemetry Agent - HTTP Transport

Thin aiohttp wrapper used by the transporter. Every request carries its own
deadline; connection failures and timeouts surface as TransportError.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
import structlog

from .errors import TransportError

logger = structlog.get_logger(__name__)


@dataclass
class HttpResponse:
    """Status and decoded JSON body (None when the body is not JSON)."""
    status: int
    reason: str = ""
    body: Any = None


class HttpTransport:
    """Shared aiohttp session for collector traffic."""

    def __init__(self):
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def post(
        self,
        url: str,
        payload: Any,
        headers: Dict[str, str],
        timeout: float,
    ) -> HttpResponse:
        """POST a JSON body."""
        return await self._request("POST", url, timeout, json=payload, headers=headers)

    async def get(self, url: str, timeout: float) -> HttpResponse:
        return await self._request("GET", url, timeout)

    async def _request(self, method: str, url: str, timeout: float, **kwargs) -> HttpResponse:
        session = await self._get_session()
        try:
            async with session.request(
                method,
                url,
                timeout=aiohttp.ClientTimeout(total=timeout),
                **kwargs
            ) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
                return HttpResponse(status=resp.status, reason=resp.reason or "", body=body)
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {url} timed out after {timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
