"""
Picks page loader.

Loads the gameweek banner first, then the four pick sections concurrently.
A failing section records its error and leaves the other sections intact.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Optional
import pandas as pd
from ..common.config import get_logger
from ..common.errors import FetchError
from .player_views import POSITIONS, GameweekInfo

logger = get_logger(__name__)

TOP_PICKS_PER_POSITION = 5
VALUE_PICKS_LIMIT = 15
DIFFERENTIAL_MAX_OWNERSHIP = 10
DIFFERENTIALS_LIMIT = 15
CAPTAIN_PICKS_LIMIT = 10


@dataclass
class PicksPage:
    """Everything the picks page shows, plus per-section failures."""
    gameweek: Optional[GameweekInfo] = None
    top_by_position: Dict[str, pd.DataFrame] = field(default_factory=dict)
    value_picks: Optional[pd.DataFrame] = None
    differentials: Optional[pd.DataFrame] = None
    captain_picks: Optional[pd.DataFrame] = None
    errors: Dict[str, FetchError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _load_top_picks(client) -> Dict[str, pd.DataFrame]:
    return {
        info["full"]: client.get_top_players_by_position(position_id, TOP_PICKS_PER_POSITION)
        for position_id, info in POSITIONS.items()
    }


def load_picks_page(client) -> PicksPage:
    """
    Load all picks page sections.

    Args:
        client: ``FPLAPIClient`` (or anything exposing the same view methods)

    Returns:
        PicksPage with every section that loaded and an error per section that failed
    """
    page = PicksPage()

    try:
        page.gameweek = client.get_current_gameweek()
    except FetchError as e:
        logger.error(f"Error loading gameweek: {e}")
        page.errors["gameweek"] = e

    sections = {
        "top_by_position": lambda: _load_top_picks(client),
        "value_picks": lambda: client.get_best_value_players(VALUE_PICKS_LIMIT),
        "differentials": lambda: client.get_differentials(DIFFERENTIAL_MAX_OWNERSHIP, DIFFERENTIALS_LIMIT),
        "captain_picks": lambda: client.get_captain_picks(CAPTAIN_PICKS_LIMIT),
    }

    with ThreadPoolExecutor(max_workers=len(sections)) as executor:
        futures = {name: executor.submit(loader) for name, loader in sections.items()}

    for name, future in futures.items():
        try:
            setattr(page, name, future.result())
        except FetchError as e:
            logger.error(f"Error loading {name}: {e}")
            page.errors[name] = e

    return page
