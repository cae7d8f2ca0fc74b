"""
Envelope Models - einheitliche JSON-Hüllen für alle Antworten

Jede Variante trägt ein `status`-Feld als Diskriminator.
Feldreihenfolge = Reihenfolge der Keys im JSON.
"""

from typing import Dict, Literal, Union

from pydantic import BaseModel, Field


class ProxySuccess(BaseModel):
    status: Literal["success"] = "success"
    url: str
    content: str
    content_type: str
    status_code: int
    headers: Dict[str, str]


class ProxyFailure(BaseModel):
    status: Literal["error"] = "error"
    url: str
    error: str
    status_code: int = 500


ProxyResult = Union[ProxySuccess, ProxyFailure]


class TestSuccess(BaseModel):
    __test__ = False  # kein pytest-Testfall

    status: Literal["success"] = "success"
    url: str
    content_length: int
    status_code: int
    content_type: str
    proxy_status: Literal["working"] = "working"


class TestFailure(BaseModel):
    __test__ = False

    status: Literal["error"] = "error"
    url: str
    error: str
    proxy_status: Literal["error", "failed"]


TestResult = Union[TestSuccess, TestFailure]


class Endpoints(BaseModel):
    proxy: str = "/?url=URL"
    test: str = "/test (POST)"
    status: str = "/status"


class UsageInfo(BaseModel):
    message: str = "Proxy Server is running!"
    usage: str = "Add ?url=URL_ENCODED_URL to fetch content"
    example: str
    endpoints: Endpoints = Field(default_factory=Endpoints)


class StatusInfo(BaseModel):
    status: Literal["running"] = "running"
    message: str = "Proxy server is operational"
    timestamp: str
    version: str


class ErrorMessage(BaseModel):
    status: Literal["error"] = "error"
    message: str
