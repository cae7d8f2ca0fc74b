"""
Shared Types für Fetcher Module
"""

from dataclasses import dataclass
from typing import Dict, Optional

@dataclass
class FetchResult:
    """Standardisiertes Ergebnis eines Upstream-Fetches"""
    url: str
    final_url: str
    status: int
    headers: Dict[str, str]
    text: str
    fetched_at: str
    content_type: Optional[str] = None


class FetchError(Exception):
    """
    Upstream-Fetch fehlgeschlagen.

    Fasst Transport-Fehler (DNS, Timeout, Connection refused) und
    Nicht-2xx-Antworten zu einer Fehlerart zusammen.
    """

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url
        self.message = message
