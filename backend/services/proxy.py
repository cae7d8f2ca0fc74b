"""
Proxy Service - übersetzt Upstream-Fetches in JSON-Envelopes

Genau ein Outbound-Fetch pro Proxy-Request, keine Retries, kein Caching.
Alle Upstream-Fehler werden zu einer Fehlerart mit status_code 500 zusammengefasst.
"""

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from services.envelopes import (
    ProxyFailure, ProxyResult, ProxySuccess, StatusInfo,
    TestFailure, TestResult, TestSuccess, UsageInfo
)
from services.fetchers.httpx_fetcher import HttpxFetcher
from services.fetchers.types import FetchError
from utils.url_utils import build_proxy_url

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
EXAMPLE_TARGET = "https://example.com"


async def fetch_through_proxy(fetcher: HttpxFetcher, target_url: str) -> ProxyResult:
    """
    Fetcht target_url einmal und verpackt das Ergebnis.

    Returns:
        ProxySuccess mit Body, Content-Type, Status und Headern des Upstreams,
        oder ProxyFailure (status_code immer 500) mit der Fehlermeldung.
    """
    logger.info(f"🔄 Fetching: {target_url}")

    try:
        result = await fetcher.fetch(target_url)
    except FetchError as e:
        logger.error(f"❌ Error: {e.message}")
        return ProxyFailure(url=target_url, error=e.message)

    logger.info(f"✅ Success: {result.status} - {len(result.text)} characters")

    return ProxySuccess(
        url=target_url,
        content=result.text,
        content_type=result.content_type,
        status_code=result.status,
        headers=result.headers,
    )


def utf16_length(text: str) -> int:
    """Länge in UTF-16 Code Units, wie String.length im Browser"""
    return len(text.encode("utf-16-le")) // 2


def usage_info(origin: str) -> UsageInfo:
    """Hilfe-Envelope für GET ohne url-Parameter"""
    return UsageInfo(example=build_proxy_url(origin, EXAMPLE_TARGET))


async def run_self_test(loopback: HttpxFetcher, test_url: str, origin: str) -> TestResult:
    """
    Testet den Proxy end-to-end über einen echten HTTP-Call auf den eigenen Endpoint.

    proxy_status:
        "working" - Proxy hat den Inhalt geliefert
        "error"   - Proxy hat einen Fehler-Envelope geliefert
        "failed"  - Loopback-Call selbst ist fehlgeschlagen
    """
    proxy_url = build_proxy_url(origin, test_url)
    logger.info(f"🧪 Self-test via {proxy_url}")

    try:
        data = await loopback.get_json(proxy_url)
    except FetchError as e:
        logger.error(f"❌ Self-test failed: {e.message}")
        return TestFailure(url=test_url, error=e.message, proxy_status="failed")

    if not isinstance(data, dict):
        return TestFailure(url=test_url, error="Unexpected proxy response", proxy_status="failed")

    if data.get("status") == "success":
        try:
            return TestSuccess(
                url=test_url,
                content_length=utf16_length(data.get("content") or ""),
                status_code=data.get("status_code"),
                content_type=data.get("content_type"),
            )
        except ValidationError as e:
            logger.error(f"❌ Self-test got incomplete proxy envelope: {e}")
            return TestFailure(url=test_url, error="Incomplete proxy response", proxy_status="failed")

    return TestFailure(
        url=test_url,
        error=str(data.get("error") or data.get("message") or "Unknown proxy error"),
        proxy_status="error",
    )


def status_info() -> StatusInfo:
    """Statischer Betriebs-Envelope"""
    return StatusInfo(
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=VERSION,
    )
