"""
Data providers for FPL Pulse.

- Proxy-fallback HTTP client shared by every provider
- FPL API (bootstrap snapshot and derived player views)
- Football news RSS aggregation
"""

from .proxy_fetch import ProxyFetchClient
from .fpl_api import FPLAPIClient
from .news_feeds import FeedSource, NewsAggregator, NewsArticle

__all__ = [
    "ProxyFetchClient",
    "FPLAPIClient",
    "FeedSource",
    "NewsAggregator",
    "NewsArticle",
]
