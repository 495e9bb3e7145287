"""
Preview tool for FPL Pulse.

Prints the derived player views and the aggregated news feed as plain text.
"""

import argparse
import sys
from typing import List, Optional
import pandas as pd
from ..common.config import get_logger
from ..common.errors import FetchError
from ..common.formatting import (
    format_number,
    format_price,
    format_relative_date,
    status_text,
)
from ..common.logging_setup import setup_logging
from ..providers.fpl_api import FPLAPIClient
from ..providers.news_feeds import NewsAggregator, NewsArticle
from ..providers.proxy_fetch import ProxyFetchClient
from ..views.picks_page import PicksPage, load_picks_page

logger = get_logger(__name__)

FALLBACK_LINKS = [
    ("BBC Sport Football", "https://www.bbc.co.uk/sport/football/premier-league"),
    ("Sky Sports Football", "https://www.skysports.com/premier-league"),
    ("The Guardian Football", "https://www.theguardian.com/football/premierleague"),
    ("Premier League Official", "https://www.premierleague.com/news"),
    ("Fixtures & Results", "https://www.premierleague.com/fixtures"),
    ("League Table", "https://www.premierleague.com/tables"),
    ("Transfer Centre", "https://www.premierleague.com/transfers"),
]

SECTIONS = ["picks", "top", "value", "differentials", "captains", "injuries", "risers", "fallers", "news"]


def format_player_line(player: pd.Series, extra: str = "") -> str:
    """
    Format a single player row.

    Args:
        player: Row of an enriched players frame
        extra: Trailing column such as a score

    Returns:
        Formatted player string
    """
    name = player.get("web_name", "Unknown")
    position = player.get("position") or "?"
    team = player.get("team_short_name") or "?"
    cost = format_price(player.get("now_cost", 0))
    points = player.get("total_points", 0)
    line = f"{name:20} {position:3} {team:3} {cost:8} {points:>4.0f}pts"
    return f"{line}  {extra}" if extra else line


def format_players(title: str, players: pd.DataFrame, extra_column: Optional[str] = None,
                   extra_format: str = "{}") -> str:
    lines = [title, "-" * len(title)]
    if players.empty:
        lines.append("  (none)")
    for _, player in players.iterrows():
        extra = extra_format.format(player[extra_column]) if extra_column else ""
        lines.append(f"  {format_player_line(player, extra)}")
    return "\n".join(lines)


def format_injuries(players: pd.DataFrame) -> str:
    lines = ["Injuries & Doubts", "-" * 17]
    for _, player in players.iterrows():
        chance = player["chance_of_playing_next_round"]
        lines.append(f"  {format_player_line(player, status_text(chance, player.get('news')))}")
    return "\n".join(lines)


def format_picks_page(page: PicksPage) -> str:
    out = []
    if page.gameweek is not None and page.gameweek.active:
        event = page.gameweek.active
        label = "Deadline passed" if event.get("is_current") else "Deadline"
        deadline = page.gameweek.deadline
        deadline_str = deadline.strftime("%a %d %b %H:%M") if deadline else "unknown"
        out.append(f"Gameweek {event['id']} | {label}: {deadline_str}")
        out.append("")

    if "top_by_position" in page.errors:
        out.append("Unable to load top picks.")
    for name, players in page.top_by_position.items():
        out.append(format_players(f"Top {name}s", players))
        out.append("")

    sections = [
        ("value_picks", "Value Picks", "points_per_million", "{:.2f} pts/£m"),
        ("differentials", "Differentials", "selected_by_percent", "{:.1f}% owned"),
        ("captain_picks", "Captain Picks", "captain_score", "score {:.2f}"),
    ]
    for attr, title, column, fmt in sections:
        players = getattr(page, attr)
        if attr in page.errors or players is None:
            out.append(f"Unable to load {title.lower()}.")
        else:
            out.append(format_players(title, players, column, fmt))
        out.append("")

    return "\n".join(out).rstrip()


def format_news(articles: List[NewsArticle]) -> str:
    if not articles:
        lines = ["Live news feed temporarily unavailable. Latest news:"]
        lines.extend(f"  {name}: {url}" for name, url in FALLBACK_LINKS)
        return "\n".join(lines)

    lines = []
    for article in articles:
        lines.append(f"{article.icon} [{article.source}] {article.title}")
        if article.description:
            lines.append(f"    {article.description}")
        lines.append(f"    {format_relative_date(article.published)}  {article.link}")
    return "\n".join(lines)


def render_section(section: str, client: FPLAPIClient, news: NewsAggregator, limit: int) -> str:
    """Build the text for one preview section."""
    if section == "picks":
        return format_picks_page(load_picks_page(client))
    if section == "top":
        return format_players("Top Players", client.get_top_players(limit))
    if section == "value":
        return format_players("Value Picks", client.get_best_value_players(limit),
                              "points_per_million", "{:.2f} pts/£m")
    if section == "differentials":
        return format_players("Differentials", client.get_differentials(limit=limit),
                              "selected_by_percent", "{:.1f}% owned")
    if section == "captains":
        return format_players("Captain Picks", client.get_captain_picks(limit),
                              "captain_score", "score {:.2f}")
    if section == "injuries":
        return format_injuries(client.get_injured_players())
    if section == "risers":
        players = client.get_price_risers(limit)
        players = players.assign(transfers=players["transfers_in_event"].map(format_number))
        return format_players("Most Transferred In", players, "transfers", "{} in")
    if section == "fallers":
        players = client.get_price_fallers(limit)
        players = players.assign(transfers=players["transfers_out_event"].map(format_number))
        return format_players("Most Transferred Out", players, "transfers", "{} out")
    if section == "news":
        return format_news(news.load_news())
    raise ValueError(f"Unknown section: {section}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="FPL Pulse Preview Tool")

    parser.add_argument("--section", choices=SECTIONS, default="picks", help="What to preview")
    parser.add_argument("--limit", type=int, default=10, help="Number of players to show")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Override logging.level from settings")

    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, force=args.log_level is not None)

    fetcher = ProxyFetchClient()
    client = FPLAPIClient(fetcher=fetcher)
    news = NewsAggregator(fetcher=fetcher)

    try:
        print(render_section(args.section, client, news, args.limit))
    except FetchError as e:
        logger.error(f"Unable to load FPL data: {e}")
        print("Unable to load FPL data. Please try again later.")
        return 1
    except KeyboardInterrupt:
        logger.info("Preview interrupted by user")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
