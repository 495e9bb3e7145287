"""
Error types raised by the FPL Pulse data-access layer.
"""

from typing import List, Optional


class FetchError(Exception):
    """Base class for every retrieval failure."""


class TransportFailure(FetchError):
    """Network, DNS or connection failure talking to a proxy."""


class HTTPStatusFailure(FetchError):
    """Proxy answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ParseFailure(FetchError):
    """Response body was not valid JSON or XML."""


class ValidationFailure(FetchError):
    """Payload parsed but is missing required fields."""


class FetchTimeout(FetchError):
    """The caller's deadline passed before a proxy answered."""


class FetchCancelled(FetchError):
    """The caller cancelled the fetch."""


class AllProxiesExhausted(FetchError):
    """
    Every proxy in the fallback list failed.

    ``last_error`` is the failure from the final proxy attempted, or None when
    the proxy list was empty.
    """

    def __init__(self, url: str, errors: Optional[List[FetchError]] = None):
        self.url = url
        self.errors = list(errors or [])
        self.last_error = self.errors[-1] if self.errors else None
        if self.last_error is not None:
            message = f"All {len(self.errors)} proxies failed for {url}: {self.last_error}"
        else:
            message = f"All proxies failed for {url}"
        super().__init__(message)


class NoArticlesAvailable(FetchError):
    """No news feed produced any article."""
