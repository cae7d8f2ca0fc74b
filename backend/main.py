from fastapi import Depends, FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import os
import logging
from dotenv import load_dotenv

# Environment Variables laden
import pathlib
env_path = pathlib.Path(__file__).parent.parent / ".env.local"
# Nur laden wenn Datei existiert (lokal), in Production kommen Env-Vars vom Host
if env_path.exists():
    load_dotenv(dotenv_path=str(env_path))
else:
    load_dotenv()  # Lädt aus System-Environment

# Logging konfigurieren
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

from services.envelopes import ErrorMessage
from services.fetchers.httpx_fetcher import BROWSER_HEADERS, HttpxFetcher
from services.proxy import (
    VERSION, fetch_through_proxy, run_self_test, status_info, usage_info
)
from utils.json_response import EnvelopeResponse, preflight_response
from utils.url_utils import get_origin


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Ein httpx Client für Upstream-Fetches (Browser-Header) und einer für den
    Loopback-Call des Self-Tests. Beide werden beim Shutdown geschlossen.
    """
    async with HttpxFetcher(headers=BROWSER_HEADERS) as upstream, HttpxFetcher() as loopback:
        app.state.upstream_fetcher = upstream
        app.state.loopback_fetcher = loopback
        logger.info("✅ Application started")
        yield
    logger.info("✅ Httpx clients closed")


# Keine Docs-Routen: GET wird auf jedem Pfad als Proxy behandelt
app = FastAPI(
    title="CORS Fetch Proxy", version=VERSION, lifespan=lifespan,
    docs_url=None, redoc_url=None, openapi_url=None,
)


def get_upstream_fetcher(request: Request) -> HttpxFetcher:
    return request.app.state.upstream_fetcher


def get_loopback_fetcher(request: Request) -> HttpxFetcher:
    return request.app.state.loopback_fetcher


def _origin(request: Request) -> str:
    return get_origin(str(request.url))


# CORS Preflight - jeder Pfad
@app.options("/{path:path}")
async def preflight():
    return preflight_response()


@app.post("/test")
async def self_test(request: Request, loopback: HttpxFetcher = Depends(get_loopback_fetcher)):
    """
    Testet eine URL über den eigenen Proxy-Endpoint (echter HTTP-Call).

    Body: {"url": "<string>"}
    """
    try:
        post_data = await request.json()
    except ValueError as e:
        logger.error(f"❌ Invalid POST data: {e}")
        return EnvelopeResponse(
            ErrorMessage(message=f"Error processing POST data: {e}").model_dump(),
            status_code=500
        )

    test_url = post_data.get("url") if isinstance(post_data, dict) else None
    if not test_url:
        return EnvelopeResponse(
            ErrorMessage(message="Missing 'url' in POST data").model_dump(),
            status_code=400
        )

    result = await run_self_test(loopback, str(test_url), _origin(request))
    return EnvelopeResponse(result.model_dump())


@app.post("/status")
async def status():
    """Betriebsstatus, ohne Outbound-Call"""
    return EnvelopeResponse(status_info().model_dump())


@app.post("/{path:path}")
async def not_found():
    return EnvelopeResponse(ErrorMessage(message="Endpoint not found").model_dump(), status_code=404)


@app.get("/{path:path}")
async def proxy_get(
    request: Request,
    fetcher: HttpxFetcher = Depends(get_upstream_fetcher),
):
    """
    Proxy-Endpoint: GET /?url=URL_ENCODED_URL

    Ohne url-Parameter wird die Usage-Info zurückgegeben.
    Bei mehrfachem url-Parameter gilt der erste.
    """
    urls = request.query_params.getlist("url")
    url = urls[0] if urls else None
    if not url:
        return EnvelopeResponse(usage_info(_origin(request)).model_dump())

    result = await fetch_through_proxy(fetcher, url)
    status_code = 200 if result.status == "success" else 500
    return EnvelopeResponse(result.model_dump(), status_code=status_code)


# Routing-Fehler (405 für nicht erlaubte Methoden, 404 sonst) als Envelope
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    headers = getattr(exc, "headers", None)
    if exc.status_code == 405:
        message = "Method not allowed"
        headers = {"Allow": "GET, POST, OPTIONS"}
    elif exc.status_code == 404:
        message = "Endpoint not found"
    else:
        message = str(exc.detail)
    return EnvelopeResponse(
        ErrorMessage(message=message).model_dump(),
        status_code=exc.status_code,
        headers=headers
    )


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    """Catch-all - keine internen Details nach außen"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return EnvelopeResponse(ErrorMessage(message="Internal server error").model_dump(), status_code=500)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
