"""
Derived views over FPL data.

- Ranked player views (top players, value, differentials, captains, injuries, price movers)
- Picks page loader
"""

from .player_views import (
    POSITIONS,
    GameweekInfo,
    enrich_players,
    top_players,
    top_players_by_position,
    best_value,
    differentials,
    injured_players,
    price_risers,
    price_fallers,
    captain_picks,
)
from .picks_page import PicksPage, load_picks_page

__all__ = [
    "POSITIONS",
    "GameweekInfo",
    "enrich_players",
    "top_players",
    "top_players_by_position",
    "best_value",
    "differentials",
    "injured_players",
    "price_risers",
    "price_fallers",
    "captain_picks",
    "PicksPage",
    "load_picks_page",
]
