"""
Ranked player views derived from the FPL bootstrap snapshot.

Every function takes the enriched players frame from ``enrich_players`` and
returns a new frame; the input is never modified. Sorting is stable so tied
players keep their upstream order.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional
import pandas as pd

POSITIONS = {
    1: {"short": "GKP", "full": "Goalkeeper", "class": "position-gkp"},
    2: {"short": "DEF", "full": "Defender", "class": "position-def"},
    3: {"short": "MID", "full": "Midfielder", "class": "position-mid"},
    4: {"short": "FWD", "full": "Forward", "class": "position-fwd"},
}

# Upstream sends form, ict_index and selected_by_percent as strings
NUMERIC_COLUMNS = [
    "total_points",
    "now_cost",
    "minutes",
    "form",
    "ict_index",
    "selected_by_percent",
    "transfers_in_event",
    "transfers_out_event",
    "chance_of_playing_next_round",
]


@dataclass
class GameweekInfo:
    """Current and next gameweek events from the bootstrap snapshot."""
    current: Optional[Dict] = None
    next: Optional[Dict] = None

    @classmethod
    def from_events(cls, events: List[Dict]) -> "GameweekInfo":
        current = next((event for event in events if event.get("is_current")), None)
        upcoming = next((event for event in events if event.get("is_next")), None)
        return cls(current=current, next=upcoming)

    @property
    def active(self) -> Optional[Dict]:
        """The gameweek to display: current if one is running, else the next."""
        return self.current or self.next

    @property
    def deadline(self) -> Optional[datetime]:
        """Parsed deadline of the active gameweek."""
        event = self.active
        if not event or not event.get("deadline_time"):
            return None
        return datetime.fromisoformat(event["deadline_time"].replace("Z", "+00:00"))


def enrich_players(elements: List[Dict], teams: List[Dict]) -> pd.DataFrame:
    """
    Build the players frame with team and position info resolved.

    Args:
        elements: Raw ``elements`` list from bootstrap data
        teams: Raw ``teams`` list from bootstrap data

    Returns:
        DataFrame with one row per player, numeric stats as floats/ints and
        ``team_name``, ``team_short_name``, ``position``, ``position_name``,
        ``position_class`` columns added
    """
    players_df = pd.DataFrame(elements)

    for column in NUMERIC_COLUMNS:
        if column in players_df.columns:
            players_df[column] = pd.to_numeric(players_df[column], errors="coerce")
        else:
            players_df[column] = float("nan")

    teams_df = pd.DataFrame(teams)
    if not teams_df.empty and "team" in players_df.columns:
        teams_by_id = teams_df.set_index("id")
        players_df["team_name"] = players_df["team"].map(teams_by_id["name"].to_dict())
        players_df["team_short_name"] = players_df["team"].map(teams_by_id["short_name"].to_dict())
    else:
        players_df["team_name"] = None
        players_df["team_short_name"] = None

    element_type = players_df["element_type"] if "element_type" in players_df.columns else pd.Series(dtype=float)
    players_df["position"] = element_type.map({k: v["short"] for k, v in POSITIONS.items()})
    players_df["position_name"] = element_type.map({k: v["full"] for k, v in POSITIONS.items()})
    players_df["position_class"] = element_type.map({k: v["class"] for k, v in POSITIONS.items()})

    return players_df


def _rank(df: pd.DataFrame, column: str, limit: Optional[int] = None, ascending: bool = False) -> pd.DataFrame:
    ranked = df.sort_values(column, ascending=ascending, kind="stable")
    if limit is not None:
        ranked = ranked.head(limit)
    return ranked.reset_index(drop=True)


def top_players(players: pd.DataFrame, limit: int = 10) -> pd.DataFrame:
    """Players with the most total points."""
    return _rank(players, "total_points", limit)


def top_players_by_position(players: pd.DataFrame, position_id: int, limit: int = 5) -> pd.DataFrame:
    """Highest scorers among players with ``element_type == position_id``."""
    return _rank(players[players["element_type"] == position_id], "total_points", limit)


def best_value(players: pd.DataFrame, limit: int = 10) -> pd.DataFrame:
    """
    Players ranked by points per million.

    Only players who have played and carry a price are considered;
    ``points_per_million`` is rounded to two decimals.
    """
    eligible = players[(players["minutes"] > 0) & (players["now_cost"] > 0)].copy()
    eligible["points_per_million"] = (
        eligible["total_points"] / (eligible["now_cost"] / 10)
    ).round(2)
    return _rank(eligible, "points_per_million", limit)


def differentials(players: pd.DataFrame, max_ownership: float = 10, limit: int = 10) -> pd.DataFrame:
    """Low-ownership players in good form (form above 4) who have played."""
    mask = (
        (players["selected_by_percent"] < max_ownership)
        & (players["form"] > 4)
        & (players["minutes"] > 0)
    )
    return _rank(players[mask], "form", limit)


def injured_players(players: pd.DataFrame) -> pd.DataFrame:
    """Players with a known chance of playing below 100, most doubtful first."""
    chance = players["chance_of_playing_next_round"]
    return _rank(players[chance.notna() & (chance < 100)], "chance_of_playing_next_round", ascending=True)


def price_risers(players: pd.DataFrame, limit: int = 10) -> pd.DataFrame:
    """Players most transferred in this gameweek."""
    return _rank(players[players["transfers_in_event"] > 0], "transfers_in_event", limit)


def price_fallers(players: pd.DataFrame, limit: int = 10) -> pd.DataFrame:
    """Players most transferred out this gameweek."""
    return _rank(players[players["transfers_out_event"] > 0], "transfers_out_event", limit)


def captain_picks(players: pd.DataFrame, limit: int = 5) -> pd.DataFrame:
    """
    Captain suggestions scored as ``form*2 + ict_index/10 + total_points/20``.

    Score is rounded to two decimals; players with missing form or ICT get a
    NaN score and sort last.
    """
    scored = players.copy()
    scored["captain_score"] = (
        scored["form"] * 2
        + scored["ict_index"] / 10
        + scored["total_points"] / 20
    ).round(2)
    return _rank(scored, "captain_score", limit)
