"""
Httpx Fetcher - Wiederverwendbarer HTTP Client für Upstream- und Loopback-Requests
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from .types import FetchError, FetchResult

logger = logging.getLogger(__name__)

# Kein Timeout per Default: Laufzeit wird nur durch die Hosting-Umgebung begrenzt
_timeout_env = os.getenv("UPSTREAM_TIMEOUT")
UPSTREAM_TIMEOUT: Optional[float] = float(_timeout_env) if _timeout_env else None

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"

# Cache-Hinweis für Zwischen-Caches (kein erzwungenes Caching)
CACHE_TTL = 300

# Header-Set, das einen echten Browser imitiert
BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Cache-Control": f"max-age={CACHE_TTL}",
}


class HttpxFetcher:
    """
    Fetcht URLs mit httpx und einem wiederverwendbaren AsyncClient.

    Der Client wird einmal pro Prozess erstellt (FastAPI Lifespan) und für alle
    Requests wiederverwendet. Implementiert Context Manager für garantierte
    Ressourcen-Freigabe.

    Keine Retries: jeder Fehler wird sofort als FetchError gemeldet.
    """

    def __init__(
        self,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = UPSTREAM_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._headers = headers
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Context Manager Entry - stellt Client bereit"""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context Manager Exit - schließt Client garantiert"""
        await self.close()

    async def _ensure_client(self):
        """Stellt sicher, dass ein Client verfügbar ist"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers=self._headers,
                transport=self._transport,
            )
            logger.debug("Httpx client created")

    async def close(self):
        """Schließt den Client"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Httpx client closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetcht eine URL genau einmal.

        Args:
            url: Die zu fetchende URL

        Returns:
            FetchResult mit vollständigem Body als Text

        Raises:
            FetchError: bei ungültiger URL, Transport-Fehlern oder Status außerhalb 2xx
        """
        await self._ensure_client()

        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, _error_message(e)) from e

        if not response.is_success:
            raise FetchError(url, f"HTTP {response.status_code}: {response.reason_phrase}")

        return FetchResult(
            url=url,
            final_url=str(response.url),
            status=response.status_code,
            headers=dict(response.headers),
            text=response.text,
            fetched_at=datetime.now(timezone.utc).isoformat(),
            content_type=response.headers.get('content-type') or 'text/html',
        )

    async def get_json(self, url: str) -> Any:
        """
        GET auf eine URL und JSON-Body parsen, unabhängig vom HTTP-Status.

        Raises:
            FetchError: bei Transport-Fehlern oder ungültigem JSON
        """
        await self._ensure_client()

        try:
            response = await self._client.get(url)
            return response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise FetchError(url, _error_message(e)) from e


def _error_message(exc: Exception) -> str:
    """Fehlertext einer Exception, Klassenname falls der Text leer ist"""
    return str(exc) or exc.__class__.__name__
