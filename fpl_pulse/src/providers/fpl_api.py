"""
FPL API client for fetching official Fantasy Premier League data.

Fetches the bootstrap-static snapshot (players, teams, gameweeks) through the
proxy-fallback client, keeps it in a five minute in-memory cache and exposes
the derived player views on top of it.
"""

from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Dict, List, Optional
import pandas as pd
from ..common.cache import TTLCache
from ..common.config import get_config, get_logger
from ..common.errors import FetchCancelled, FetchError, FetchTimeout, ValidationFailure
from ..views import player_views
from ..views.player_views import POSITIONS, GameweekInfo, enrich_players
from .proxy_fetch import ProxyFetchClient

logger = get_logger(__name__)

BOOTSTRAP_ENDPOINT = "bootstrap-static/"
REQUIRED_BOOTSTRAP_KEYS = ("elements", "teams", "events")


def validate_bootstrap(data) -> Dict:
    """
    Check a bootstrap payload has non-empty players, teams and events.

    Raises:
        ValidationFailure: if the payload is not a dict or a required list is missing/empty
    """
    if not isinstance(data, dict):
        raise ValidationFailure("Invalid data structure received from FPL API")
    missing = [key for key in REQUIRED_BOOTSTRAP_KEYS if not data.get(key)]
    if missing:
        raise ValidationFailure(
            f"Invalid data structure received from FPL API: missing {', '.join(missing)}"
        )
    return data


class FPLAPIClient:
    """
    Client for the public FPL API with proxy fallback and caching.
    """

    def __init__(
        self,
        fetcher: Optional[ProxyFetchClient] = None,
        cache: Optional[TTLCache] = None,
        base_url: Optional[str] = None,
        serve_stale_on_error: Optional[bool] = None,
    ):
        """
        Initialize FPL API client.

        Args:
            fetcher: Proxy-fallback client used for every request
            cache: Cache holding the bootstrap payload
            base_url: API root; defaults to ``api.fpl.base_url``
            serve_stale_on_error: Return the last good payload when a refresh fails
        """
        self.config = get_config()
        self.fetcher = fetcher or ProxyFetchClient()
        self.cache = cache or TTLCache(self.config.get("cache.bootstrap_ttl_seconds", 300))
        self.base_url = (base_url or self.config.get("api.fpl.base_url")).rstrip("/")

        if serve_stale_on_error is None:
            serve_stale_on_error = self.config.get("cache.serve_stale_on_error", True)
        self.serve_stale_on_error = serve_stale_on_error

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _load_bootstrap(self, **fetch_kwargs) -> Dict:
        data = self.fetcher.fetch(self._url(BOOTSTRAP_ENDPOINT), fmt="json", **fetch_kwargs)
        validate_bootstrap(data)
        logger.info(
            f"Fetched bootstrap data: {len(data['elements'])} players, "
            f"{len(data['teams'])} teams, {len(data['events'])} gameweeks"
        )
        return data

    def get_bootstrap_data(self, **fetch_kwargs) -> Dict:
        """
        Get bootstrap-static data (players, teams, events).

        Returns the cached snapshot while it is younger than the TTL; otherwise
        fetches, validates and caches a new one. Concurrent callers during a
        refresh share a single upstream request.

        A caller's ``cancel_event`` and ``deadline`` apply to that caller only:
        a caller waiting on someone else's refresh gives up at its own deadline,
        and starts its own fetch if the refreshing caller was cancelled or ran
        out of time.

        Args:
            **fetch_kwargs: ``timeout``, ``deadline`` or ``cancel_event`` passed to the fetcher

        Returns:
            Bootstrap data dictionary

        Raises:
            AllProxiesExhausted: no proxy could retrieve the data
            ValidationFailure: the data lacked players, teams or events
            FetchTimeout: ``deadline`` passed
            FetchCancelled: ``cancel_event`` was set
        """
        deadline = fetch_kwargs.get("deadline")
        wait_timeout = None if deadline is None else max(0.0, deadline - self.fetcher.clock())

        try:
            try:
                return self.cache.get_or_load(
                    BOOTSTRAP_ENDPOINT,
                    lambda: self._load_bootstrap(**fetch_kwargs),
                    timeout=wait_timeout,
                    retry_on=(FetchCancelled, FetchTimeout),
                )
            except FutureTimeoutError as e:
                raise FetchTimeout("Deadline passed waiting on bootstrap refresh") from e
        except FetchError as e:
            stale = self.cache.get_stale(BOOTSTRAP_ENDPOINT)
            if self.serve_stale_on_error and stale is not None:
                logger.warning(f"Serving stale bootstrap data after failed refresh: {e}")
                return stale
            logger.error(f"Error fetching FPL data: {e}")
            raise

    def get_current_gameweek(self) -> GameweekInfo:
        """Get the current and next gameweek events."""
        data = self.get_bootstrap_data()
        return GameweekInfo.from_events(data["events"])

    def get_players(self) -> pd.DataFrame:
        """Get all players with team and position info."""
        data = self.get_bootstrap_data()
        return enrich_players(data["elements"], data["teams"])

    def get_teams(self) -> List[Dict]:
        """Get teams."""
        return self.get_bootstrap_data()["teams"]

    def get_top_players(self, limit: int = 10) -> pd.DataFrame:
        return player_views.top_players(self.get_players(), limit)

    def get_top_players_by_position(self, position_id: int, limit: int = 5) -> pd.DataFrame:
        if position_id not in POSITIONS:
            raise ValueError(f"Unknown position id: {position_id}")
        return player_views.top_players_by_position(self.get_players(), position_id, limit)

    def get_best_value_players(self, limit: int = 10) -> pd.DataFrame:
        return player_views.best_value(self.get_players(), limit)

    def get_differentials(self, max_ownership: float = 10, limit: int = 10) -> pd.DataFrame:
        return player_views.differentials(self.get_players(), max_ownership, limit)

    def get_injured_players(self) -> pd.DataFrame:
        return player_views.injured_players(self.get_players())

    def get_price_risers(self, limit: int = 10) -> pd.DataFrame:
        return player_views.price_risers(self.get_players(), limit)

    def get_price_fallers(self, limit: int = 10) -> pd.DataFrame:
        return player_views.price_fallers(self.get_players(), limit)

    def get_captain_picks(self, limit: int = 5) -> pd.DataFrame:
        return player_views.captain_picks(self.get_players(), limit)
