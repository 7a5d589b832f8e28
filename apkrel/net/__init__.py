"""Network clients."""

from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]
