"""
FPL Pulse - Fantasy Premier League stats and football news client.

Fetches the public FPL bootstrap snapshot and football RSS feeds through
CORS-proxy mirrors with fallback, caches the snapshot in memory and derives
ranked player views:
- Top players overall and by position
- Value picks and differentials
- Captain suggestions
- Injury list and price movers

Version: 0.1.0
"""

__version__ = "0.1.0"

from .common.config import get_config, get_logger
from .common.cache import TTLCache

__all__ = [
    "get_config",
    "get_logger",
    "TTLCache",
]
