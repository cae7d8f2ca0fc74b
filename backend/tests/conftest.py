"""Test fixtures — FastAPI app driven through httpx, upstream faked with MockTransport.

Invariants:
    - No test touches the real network
    - Upstream fetcher carries the production browser header set
    - Loopback fetcher points back at the app itself (ASGITransport),
      so POST /test runs the real proxy path end-to-end
"""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from main import app, get_loopback_fetcher, get_upstream_fetcher
from services.fetchers.httpx_fetcher import BROWSER_HEADERS, HttpxFetcher

BASE_URL = "http://testserver"


def _route_key(url: httpx.URL) -> tuple:
    return (url.scheme, url.host, url.path or "/")


class FakeUpstream:
    """Serves canned responses by URL; unknown hosts fail like a DNS error."""

    def __init__(self):
        self.routes: dict[tuple, tuple[int, dict]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, status_code: int = 200, **kwargs) -> None:
        self.routes[_route_key(httpx.URL(url))] = (status_code, kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(_route_key(request.url))
        if route is None:
            raise httpx.ConnectError(
                "[Errno -2] Name or service not known", request=request,
            )
        status_code, kwargs = route
        return httpx.Response(status_code, **kwargs)


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    fake.add(
        "https://example.com",
        text="<html><body>Example Domain</body></html>",
        headers={"content-type": "text/html; charset=UTF-8"},
    )
    return fake


@pytest.fixture
async def upstream_fetcher(upstream):
    fetcher = HttpxFetcher(
        headers=BROWSER_HEADERS,
        transport=httpx.MockTransport(upstream.handler),
    )
    yield fetcher
    await fetcher.close()


@pytest.fixture
async def loopback_fetcher():
    fetcher = HttpxFetcher(transport=ASGITransport(app=app))
    yield fetcher
    await fetcher.close()


@pytest.fixture
async def client(upstream_fetcher, loopback_fetcher):
    """App client with both fetchers overridden."""
    app.dependency_overrides[get_upstream_fetcher] = lambda: upstream_fetcher
    app.dependency_overrides[get_loopback_fetcher] = lambda: loopback_fetcher
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url=BASE_URL,
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
