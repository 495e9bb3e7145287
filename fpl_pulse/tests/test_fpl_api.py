"""
Tests for the FPL API client and its bootstrap cache.
"""

import threading
import time

import pytest

from fpl_pulse.src.common.cache import TTLCache
from fpl_pulse.src.common.errors import (
    AllProxiesExhausted,
    FetchCancelled,
    FetchTimeout,
    TransportFailure,
    ValidationFailure,
)
from fpl_pulse.src.providers.fpl_api import FPLAPIClient, validate_bootstrap
from conftest import CountingFetcher, make_bootstrap, make_player

BASE_URL = "https://fantasy.premierleague.com/api"


def make_client(fetcher, clock, serve_stale_on_error=False):
    return FPLAPIClient(
        fetcher=fetcher,
        cache=TTLCache(ttl_seconds=300, clock=clock),
        base_url=BASE_URL,
        serve_stale_on_error=serve_stale_on_error,
    )


def exhausted():
    return AllProxiesExhausted(f"{BASE_URL}/bootstrap-static/", [TransportFailure("blocked")])


def test_fetches_bootstrap_endpoint(clock):
    fetcher = CountingFetcher(make_bootstrap())
    client = make_client(fetcher, clock)

    client.get_bootstrap_data()

    assert fetcher.calls == [(f"{BASE_URL}/bootstrap-static/", "json")]


def test_cached_payload_returned_within_ttl(clock):
    fetcher = CountingFetcher(make_bootstrap())
    client = make_client(fetcher, clock)

    first = client.get_bootstrap_data()
    clock.advance(4 * 60 + 59)
    second = client.get_bootstrap_data()

    assert second is first
    assert len(fetcher.calls) == 1


def test_refetches_after_ttl(clock):
    fetcher = CountingFetcher(make_bootstrap(), make_bootstrap([make_player(9)]))
    client = make_client(fetcher, clock)

    client.get_bootstrap_data()
    clock.advance(5 * 60 + 1)
    refreshed = client.get_bootstrap_data()

    assert len(fetcher.calls) == 2
    assert refreshed["elements"][0]["id"] == 9


@pytest.mark.parametrize("missing", ["elements", "teams", "events"])
def test_validation_rejects_missing_sections(missing):
    payload = make_bootstrap()
    payload[missing] = []
    with pytest.raises(ValidationFailure):
        validate_bootstrap(payload)


def test_validation_rejects_non_dict():
    with pytest.raises(ValidationFailure):
        validate_bootstrap(["not", "a", "dict"])


def test_malformed_payload_not_cached(clock):
    bad = {"elements": [make_player(1)], "teams": [], "events": []}
    fetcher = CountingFetcher(bad, make_bootstrap())
    client = make_client(fetcher, clock)

    with pytest.raises(ValidationFailure):
        client.get_bootstrap_data()

    assert client.get_bootstrap_data()["teams"]
    assert len(fetcher.calls) == 2


def test_failed_refresh_propagates_without_stale(clock):
    fetcher = CountingFetcher(make_bootstrap(), exhausted())
    client = make_client(fetcher, clock, serve_stale_on_error=False)

    client.get_bootstrap_data()
    clock.advance(301)

    with pytest.raises(AllProxiesExhausted):
        client.get_bootstrap_data()


def test_failed_refresh_serves_stale_when_enabled(clock):
    fetcher = CountingFetcher(make_bootstrap(), exhausted())
    client = make_client(fetcher, clock, serve_stale_on_error=True)

    first = client.get_bootstrap_data()
    clock.advance(301)

    assert client.get_bootstrap_data() is first
    assert len(fetcher.calls) == 2


def test_first_fetch_failure_propagates_even_with_stale_enabled(clock):
    fetcher = CountingFetcher(exhausted())
    client = make_client(fetcher, clock, serve_stale_on_error=True)

    with pytest.raises(AllProxiesExhausted):
        client.get_bootstrap_data()


def test_current_gameweek(clock):
    client = make_client(CountingFetcher(make_bootstrap()), clock)

    info = client.get_current_gameweek()

    assert info.current["id"] == 7
    assert info.next["id"] == 8
    assert info.active["id"] == 7
    assert info.deadline.year == 2025


def test_players_resolve_team_and_position(clock):
    client = make_client(CountingFetcher(make_bootstrap()), clock)

    players = client.get_players()

    assert list(players["team_name"]) == ["Arsenal", "Liverpool"]
    assert list(players["team_short_name"]) == ["ARS", "LIV"]
    assert set(players["position"]) == {"MID"}


def test_view_methods_share_one_fetch(clock):
    elements = [
        make_player(1, total_points=50, element_type=4, form="6.0", ict_index="40.0"),
        make_player(2, total_points=30, element_type=2, chance_of_playing_next_round=50),
    ]
    fetcher = CountingFetcher(make_bootstrap(elements))
    client = make_client(fetcher, clock)

    assert client.get_top_players(1)["id"].tolist() == [1]
    assert client.get_top_players_by_position(2)["id"].tolist() == [2]
    assert client.get_injured_players()["id"].tolist() == [2]
    assert client.get_captain_picks(1)["id"].tolist() == [1]
    assert len(client.get_teams()) == 2
    assert len(fetcher.calls) == 1


def test_unknown_position_rejected(clock):
    client = make_client(CountingFetcher(make_bootstrap()), clock)
    with pytest.raises(ValueError):
        client.get_top_players_by_position(7)


def test_invalid_refresh_serves_stale_and_keeps_cache(clock):
    bad = {"elements": [make_player(1)], "teams": [], "events": []}
    fetcher = CountingFetcher(make_bootstrap(), bad)
    client = make_client(fetcher, clock, serve_stale_on_error=True)

    first = client.get_bootstrap_data()
    clock.advance(301)

    assert client.get_bootstrap_data() is first
    assert client.cache.get_stale("bootstrap-static/") is first
    assert client.cache.age("bootstrap-static/") == pytest.approx(301)


class BlockingFetcher:
    """Holds the first fetch until released; honours cancel_event afterwards."""

    clock = staticmethod(time.monotonic)

    def __init__(self, payload):
        self.payload = payload
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0
        self._lock = threading.Lock()

    def fetch(self, url, fmt="json", cancel_event=None, **kwargs):
        with self._lock:
            self.calls += 1
            first = self.calls == 1
        if first:
            self.started.set()
            self.release.wait(timeout=5)
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelled(f"Fetch of {url} cancelled")
        return self.payload


def test_cancelled_refresh_does_not_fail_other_callers(clock):
    fetcher = BlockingFetcher(make_bootstrap())
    client = make_client(fetcher, clock)
    cancel = threading.Event()
    outcomes = {}

    def cancelling_caller():
        try:
            outcomes["cancelled"] = client.get_bootstrap_data(cancel_event=cancel)
        except FetchCancelled as e:
            outcomes["cancelled"] = e

    def plain_caller():
        outcomes["plain"] = client.get_bootstrap_data()

    first = threading.Thread(target=cancelling_caller)
    second = threading.Thread(target=plain_caller)
    first.start()
    assert fetcher.started.wait(timeout=5)
    second.start()
    time.sleep(0.05)
    cancel.set()
    fetcher.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert isinstance(outcomes["cancelled"], FetchCancelled)
    assert isinstance(outcomes["plain"], dict)
    assert outcomes["plain"]["teams"]
    assert fetcher.calls == 2


def test_waiting_caller_honours_its_own_deadline(clock):
    fetcher = BlockingFetcher(make_bootstrap())
    client = make_client(fetcher, clock)

    first = threading.Thread(target=client.get_bootstrap_data)
    first.start()
    assert fetcher.started.wait(timeout=5)

    try:
        with pytest.raises(FetchTimeout):
            client.get_bootstrap_data(deadline=time.monotonic() + 0.05)
    finally:
        fetcher.release.set()
        first.join(timeout=5)

    assert fetcher.calls == 1
    assert client.get_bootstrap_data()["teams"]
