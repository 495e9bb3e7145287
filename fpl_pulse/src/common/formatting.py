"""
Display formatting helpers shared by the views and the preview CLI.
"""

from datetime import datetime, timezone
from typing import Optional


def format_price(price: float) -> str:
    """Format an FPL price held in tenths, e.g. 125 -> '£12.5m'."""
    return f"£{price / 10:.1f}m"


def format_number(num: float) -> str:
    """Abbreviate large counts, e.g. 1_250_000 -> '1.2M'."""
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def _is_available(chance: Optional[float]) -> bool:
    # NaN comes through from pandas for unknown availability
    return chance is None or chance != chance or chance == 100


def status_class(chance: Optional[float]) -> str:
    """CSS-style status bucket for a chance-of-playing value."""
    if _is_available(chance):
        return "status-available"
    if chance >= 75:
        return "status-doubtful"
    return "status-injured"


def status_text(chance: Optional[float], news: Optional[str] = None) -> str:
    """Human readable availability, preferring the upstream news blurb."""
    if _is_available(chance):
        return "Available"
    if news:
        return news
    if chance > 0:
        return f"{int(chance)}% chance"
    return "Unavailable"


def format_relative_date(published: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Describe a publish time relative to ``now``.

    Minutes under an hour, hours under a day, days under a week, otherwise an
    absolute date like '3 Oct 2025'. Returns an empty string for unknown dates.
    """
    if published is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)

    seconds = (now - published).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours < 24:
        return f"{hours} hours ago"
    if days < 7:
        return f"{days} days ago"
    return f"{published.day} {published.strftime('%b %Y')}"
