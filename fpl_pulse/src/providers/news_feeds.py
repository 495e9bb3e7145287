"""
Football news aggregation from RSS feeds.

Fetches every configured feed through the proxy-fallback client in
parallel, keeps Premier League / FPL related items, merges them and sorts
newest first. A failing feed contributes no articles and never fails the
whole load.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, List, Optional
from bs4 import BeautifulSoup
from ..common.config import get_config, get_logger
from ..common.errors import NoArticlesAvailable
from ..common.logging_setup import TimedLogger
from .proxy_fetch import ProxyFetchClient

logger = get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class FeedSource:
    name: str
    url: str
    icon: str = ""


@dataclass
class NewsArticle:
    title: str
    link: str
    description: str
    pub_date: str
    published: Optional[datetime]
    source: str
    icon: str


def clean_text(text: Optional[str]) -> str:
    """Strip HTML tags and decode entities."""
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text().strip()


def truncate(text: str, length: int) -> str:
    """Cut ``text`` to ``length`` characters, marking the cut with '...'."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def parse_pub_date(value: str) -> Optional[datetime]:
    """
    Parse an RSS (RFC 822) or Atom (ISO 8601) date.

    Returns an aware datetime, or None when the value is empty or unparseable.
    """
    if not value:
        return None
    try:
        published = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            published = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published


def _child_text(item, name: str) -> str:
    child = item.find(name)
    return child.get_text() if child is not None else ""


class NewsAggregator:
    """
    Aggregator for football news RSS feeds.
    """

    def __init__(
        self,
        fetcher: Optional[ProxyFetchClient] = None,
        feeds: Optional[Iterable[FeedSource]] = None,
        keywords: Optional[Iterable[str]] = None,
    ):
        """
        Initialize news aggregator.

        Args:
            fetcher: Proxy-fallback client shared with the FPL API client
            feeds: Feed sources; defaults to ``news.feeds``
            keywords: Topic keywords; defaults to ``news.keywords``
        """
        config = get_config()
        self.fetcher = fetcher or ProxyFetchClient()

        if feeds is None:
            feeds = [FeedSource(**feed) for feed in config.get_feed_sources()]
        self.feeds: List[FeedSource] = list(feeds)

        if keywords is None:
            keywords = config.get("news.keywords", [])
        self.keywords = [keyword.lower() for keyword in keywords]

        self.general_marker = config.get("news.general_marker", "Football")
        self.per_feed_limit = config.get("news.per_feed_limit", 10)
        self.max_articles = config.get("news.max_articles", 20)
        self.description_length = config.get("news.description_length", 150)
        self.raise_on_empty = config.get("news.raise_on_empty", False)

    def is_relevant(self, source: FeedSource, title: str, description: str) -> bool:
        """Keyword match on the item, bypassed for general football feeds."""
        if self.general_marker and self.general_marker in source.name:
            return True
        text = f"{title} {description}".lower()
        return any(keyword in text for keyword in self.keywords)

    def fetch_feed(self, source: FeedSource, cancel_event: Optional[threading.Event] = None) -> List[NewsArticle]:
        """
        Fetch and parse a single feed.

        Args:
            source: Feed to fetch
            cancel_event: Optional cancellation token passed to the fetcher

        Returns:
            Relevant articles among the first ``per_feed_limit`` items

        Raises:
            FetchError: the feed could not be retrieved or parsed
        """
        soup = self.fetcher.fetch(source.url, fmt="xml", cancel_event=cancel_event)

        articles = []
        for item in soup.find_all(["item", "entry"])[:self.per_feed_limit]:
            title = clean_text(_child_text(item, "title"))
            description = clean_text(_child_text(item, "description") or _child_text(item, "summary"))

            if not self.is_relevant(source, title, description):
                continue

            link = _child_text(item, "link").strip()
            if not link:
                link_tag = item.find("link")
                link = link_tag.get("href", "") if link_tag is not None else ""
            pub_date = (_child_text(item, "pubDate") or _child_text(item, "updated")).strip()

            articles.append(NewsArticle(
                title=title,
                link=link,
                description=truncate(description, self.description_length),
                pub_date=pub_date,
                published=parse_pub_date(pub_date),
                source=source.name,
                icon=source.icon,
            ))

        logger.debug(f"{source.name}: {len(articles)} relevant articles")
        return articles

    def load_news(self, limit: Optional[int] = None, cancel_event: Optional[threading.Event] = None) -> List[NewsArticle]:
        """
        Load the latest articles across all feeds.

        Args:
            limit: Maximum articles to return; defaults to ``news.max_articles``
            cancel_event: Optional cancellation token passed to every feed fetch

        Returns:
            Articles newest first; undated articles last

        Raises:
            NoArticlesAvailable: nothing loaded and ``news.raise_on_empty`` is set
        """
        limit = self.max_articles if limit is None else limit
        all_articles: List[NewsArticle] = []

        if self.feeds:
            with TimedLogger(logger, f"fetching {len(self.feeds)} news feeds", logging.DEBUG), \
                    ThreadPoolExecutor(max_workers=len(self.feeds)) as executor:
                futures = [
                    (source, executor.submit(self.fetch_feed, source, cancel_event))
                    for source in self.feeds
                ]

            for source, future in futures:
                try:
                    all_articles.extend(future.result())
                except Exception as e:
                    logger.warning(f"Failed to fetch {source.name}: {e}")

        all_articles.sort(key=lambda article: article.published or _OLDEST, reverse=True)
        all_articles = all_articles[:limit]

        if not all_articles and self.raise_on_empty:
            raise NoArticlesAvailable("No articles available from any feed")

        logger.info(f"Loaded {len(all_articles)} news articles from {len(self.feeds)} feeds")
        return all_articles
