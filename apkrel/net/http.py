"""HTTP client abstraction for the GitHub REST API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from apkrel.core.result import Err, Ok, Result

__all__ = [
    "HttpCall",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]

_GITHUB_ACCEPT = "application/vnd.github+json"
_GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Raw response body, if the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Successful response; ``data`` is the decoded JSON body or None."""

    status: int
    data: object = None


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    This abstraction allows injecting mock clients for testing,
    avoiding real network calls in unit tests.
    """

    def request_json(
        self,
        method: str,
        url: str,
        payload: dict[str, object] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a JSON request and decode the JSON response.

        Args:
            method: HTTP verb (GET, POST, PATCH, DELETE)
            url: Absolute URL
            payload: Optional JSON body

        Returns:
            Ok with HttpResponse, or Err with HttpError for non-2xx / network errors
        """
        ...

    def upload_file(
        self,
        url: str,
        path: Path,
        content_type: str,
    ) -> Result[HttpResponse, HttpError]:
        """POST a file's bytes as the request body."""
        ...


def _decode_json(raw: bytes) -> object:
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


class RealHttpClient:
    """Real HTTP client using urllib.

    Sends ``Authorization: Bearer <token>`` when a token is configured.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        timeout: float = 60.0,
        user_agent: str = "apk-release",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._token = token
        self._ssl_context = ssl.create_default_context()

    def _headers(self, content_type: str | None) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": _GITHUB_ACCEPT,
            "X-GitHub-Api-Version": _GITHUB_API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _send(self, req: urllib.request.Request) -> Result[HttpResponse, HttpError]:
        url = req.full_url
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(status=response.status, data=_decode_json(response.read())))
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if e.fp is not None else ""
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def request_json(
        self,
        method: str,
        url: str,
        payload: dict[str, object] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers=self._headers("application/json" if data is not None else None),
        )
        return self._send(req)

    def upload_file(
        self,
        url: str,
        path: Path,
        content_type: str,
    ) -> Result[HttpResponse, HttpError]:
        try:
            size = path.stat().st_size
            with path.open("rb") as fh:
                headers = self._headers(content_type)
                headers["Content-Length"] = str(size)
                req = urllib.request.Request(url, data=fh, method="POST", headers=headers)
                return self._send(req)
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"cannot read {path}: {e}"))


@dataclass(frozen=True, slots=True)
class HttpCall:
    """A request recorded by MockHttpClient."""

    method: str
    url: str
    payload: dict[str, object] | None = None
    content_type: str | None = None


def _empty_calls() -> list[HttpCall]:
    return []


def _empty_responses() -> dict[tuple[str, str], HttpResponse | HttpError]:
    return {}


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url). Unknown GETs answer 404, any other
    unknown request answers 201 with an empty body.

    Usage:
        client = MockHttpClient()
        client.set("GET", "https://api.example.com/x", HttpResponse(200, {"id": 1}))
        result = client.request_json("GET", "https://api.example.com/x")
        assert result == Ok(HttpResponse(200, {"id": 1}))
    """

    responses: dict[tuple[str, str], HttpResponse | HttpError] = field(
        default_factory=_empty_responses
    )
    calls: list[HttpCall] = field(default_factory=_empty_calls)

    def set(self, method: str, url: str, response: HttpResponse | HttpError) -> None:
        self.responses[(method, url)] = response

    def _respond(self, method: str, url: str) -> Result[HttpResponse, HttpError]:
        response = self.responses.get((method, url))
        if response is None:
            if method == "GET":
                return Err(HttpError(url=url, status=404, message="Not Found (mock)"))
            return Ok(HttpResponse(status=201))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def request_json(
        self,
        method: str,
        url: str,
        payload: dict[str, object] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(HttpCall(method=method, url=url, payload=payload))
        return self._respond(method, url)

    def upload_file(
        self,
        url: str,
        path: Path,
        content_type: str,
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(HttpCall(method="POST", url=url, content_type=content_type))
        return self._respond("POST", url)

    def calls_to(self, method: str, prefix: str = "") -> list[HttpCall]:
        return [c for c in self.calls if c.method == method and c.url.startswith(prefix)]
