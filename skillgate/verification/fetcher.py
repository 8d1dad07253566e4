"""Download of the signing certificate chain."""

from __future__ import annotations

import asyncio
from typing import Protocol

import aiohttp

from skillgate.utils.logging import get_logger
from skillgate.verification.errors import CertificateFetchError
from skillgate.verification.models import ValidatorConfig

log = get_logger(__name__)


class CertificateSource(Protocol):
    async def fetch(self, url: str) -> bytes: ...


class CertificateFetcher:
    """Fetches certificate documents over HTTPS with a single shared session.

    No retries: a failed download rejects the request.
    """

    def __init__(self, config: ValidatorConfig) -> None:
        self._timeout = aiohttp.ClientTimeout(total=config.fetch_timeout.total_seconds())
        # True keeps aiohttp's default context backed by the system trust store
        self._ssl = not config.insecure_skip_verify
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def fetch(self, url: str) -> bytes:
        session = self._get_session()
        try:
            async with session.get(url, ssl=self._ssl) as resp:
                resp.raise_for_status()
                return await resp.read()
        except asyncio.TimeoutError as exc:
            log.warning("cert_fetch_timeout", url=url, timeout=self._timeout.total)
            raise CertificateFetchError(f"timed out downloading certificate from {url}") from exc
        except aiohttp.ClientError as exc:
            log.warning("cert_fetch_failed", url=url, error=str(exc))
            raise CertificateFetchError(f"could not download certificate from {url}: {exc}") from exc

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
