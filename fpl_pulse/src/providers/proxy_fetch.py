"""
Proxy-fallback HTTP client.

Public FPL and news endpoints block cross-origin browser requests, so every
request is routed through one of several public CORS-proxy mirrors. Mirrors
are tried in order and the first one returning a parsable body wins.
"""

import threading
import time
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import quote
import requests
from bs4 import BeautifulSoup
from ..common.config import get_config, get_logger
from ..common.errors import (
    AllProxiesExhausted,
    FetchCancelled,
    FetchError,
    FetchTimeout,
    HTTPStatusFailure,
    ParseFailure,
    TransportFailure,
)
from ..common.logging_setup import log_api_call

logger = get_logger(__name__)

FEED_ROOT_TAGS = ["rss", "feed", "channel", "RDF"]


def build_proxy_url(prefix: str, target_url: str) -> str:
    """Wrap ``target_url`` for a proxy, encoding it the way encodeURIComponent does."""
    return prefix + quote(target_url, safe="-_.!~*'()")


def parse_json(response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ParseFailure(f"Invalid JSON response: {e}") from e


def parse_xml(response) -> BeautifulSoup:
    soup = BeautifulSoup(response.text, "xml")
    if soup.find(FEED_ROOT_TAGS) is None:
        raise ParseFailure("Response is not an RSS or Atom document")
    return soup


PARSERS = {
    "json": parse_json,
    "xml": parse_xml,
}


class ProxyFetchClient:
    """
    Client that retrieves a URL through an ordered list of CORS proxies.
    """

    def __init__(
        self,
        proxies: Optional[Sequence[str]] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize proxy client.

        Args:
            proxies: Ordered proxy prefixes; defaults to ``api.proxy.prefixes``
            session: HTTP session (anything with a requests-style ``get``)
            timeout: Per-request timeout in seconds; defaults to ``api.proxy.timeout``
            clock: Monotonic clock used for deadlines
        """
        config = get_config()
        self.proxies: List[str] = list(proxies) if proxies is not None else config.get_proxy_prefixes()
        self.timeout = timeout if timeout is not None else config.get("api.proxy.timeout", 15)
        self.clock = clock

        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": config.get("api.proxy.user_agent", "fpl-pulse/0.1")})
        self.session = session

    def _request_timeout(self, timeout: Optional[float], deadline: Optional[float]) -> float:
        request_timeout = timeout if timeout is not None else self.timeout
        if deadline is None:
            return request_timeout
        remaining = deadline - self.clock()
        if remaining <= 0:
            raise FetchTimeout("Deadline passed before a proxy answered")
        return min(request_timeout, remaining)

    def _fetch_once(self, proxy: str, url: str, fmt: str, request_timeout: float) -> Any:
        proxy_url = build_proxy_url(proxy, url)
        start = self.clock()

        try:
            response = self.session.get(proxy_url, timeout=request_timeout)
        except requests.exceptions.RequestException as e:
            raise TransportFailure(f"Request via {proxy} failed: {e}") from e

        log_api_call(url, response.status_code, self.clock() - start)

        if not 200 <= response.status_code < 300:
            raise HTTPStatusFailure(
                f"HTTP error! status: {response.status_code}", response.status_code
            )

        return PARSERS[fmt](response)

    def fetch(
        self,
        url: str,
        fmt: str = "json",
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """
        Fetch ``url`` through the first proxy that succeeds.

        Args:
            url: Target URL (unencoded)
            fmt: 'json' or 'xml'
            timeout: Per-request timeout override in seconds
            deadline: Absolute ``clock()`` reading after which no more proxies are tried
            cancel_event: Set by the caller to abandon the fetch between attempts

        Returns:
            Parsed payload from the first successful proxy

        Raises:
            AllProxiesExhausted: every proxy failed; wraps the last error
            FetchTimeout: the deadline passed
            FetchCancelled: ``cancel_event`` was set
        """
        if fmt not in PARSERS:
            raise ValueError(f"Unsupported format: {fmt}")

        errors: List[FetchError] = []

        for proxy in self.proxies:
            if cancel_event is not None and cancel_event.is_set():
                raise FetchCancelled(f"Fetch of {url} cancelled")
            request_timeout = self._request_timeout(timeout, deadline)

            try:
                return self._fetch_once(proxy, url, fmt, request_timeout)
            except (TransportFailure, HTTPStatusFailure, ParseFailure) as e:
                logger.warning(f"Proxy {proxy} failed: {e}")
                errors.append(e)

        error = AllProxiesExhausted(url, errors)
        logger.error(str(error))
        raise error from error.last_error
