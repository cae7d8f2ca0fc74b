"""
URL Utilities - Encoding und Origin-Bestimmung für Proxy-URLs
"""

from urllib.parse import quote, urlparse

# Zeichen, die encodeURIComponent zusätzlich zu A-Z a-z 0-9 - _ . ~ unverändert lässt
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    """
    Percent-Encoding einer einzelnen URL-Komponente (Query-Wert).

    Reserviert wie encodeURIComponent: alles außer A-Z a-z 0-9 - _ . ! ~ * ' ( )
    wird UTF-8 percent-encoded.

    Beispiel:
        >>> encode_uri_component("https://example.com")
        'https%3A%2F%2Fexample.com'
    """
    return quote(value, safe=_URI_COMPONENT_SAFE)


def get_origin(url: str) -> str:
    """
    Extrahiert den Origin (scheme + host[:port]) aus einer URL.

    Args:
        url: Vollständige URL

    Returns:
        Origin ohne trailing slash

    Beispiel:
        >>> get_origin("https://proxy.example.dev/test?x=1")
        'https://proxy.example.dev'
    """
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def build_proxy_url(origin: str, target_url: str) -> str:
    """
    Baut die Proxy-URL für eine Ziel-URL.

    Beispiel:
        >>> build_proxy_url("https://proxy.example.dev", "https://example.com")
        'https://proxy.example.dev/?url=https%3A%2F%2Fexample.com'
    """
    return f"{origin}/?url={encode_uri_component(target_url)}"
