"""
Shared fakes for FPL Pulse tests.

No test touches the network: HTTP goes through FakeSession and time through
FakeClock.
"""

import json

import pytest


class FakeClock:
    """Manually advanced clock standing in for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text

    def json(self):
        if self._json is not None:
            return self._json
        return json.loads(self.text)


class FakeSession:
    """
    Scripted session keyed by proxy prefix.

    Each value is a FakeResponse to return or an exception to raise.
    """

    def __init__(self, script):
        self.script = script
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        for prefix, outcome in self.script.items():
            if url.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"Unexpected request: {url}")


def make_player(player_id, **overrides):
    """Bootstrap ``elements`` row with neutral defaults."""
    player = {
        "id": player_id,
        "web_name": f"Player{player_id}",
        "team": 1,
        "element_type": 3,
        "total_points": 0,
        "now_cost": 50,
        "minutes": 90,
        "selected_by_percent": "5.0",
        "form": "0.0",
        "ict_index": "0.0",
        "transfers_in_event": 0,
        "transfers_out_event": 0,
        "chance_of_playing_next_round": None,
        "news": "",
    }
    player.update(overrides)
    return player


TEAMS = [
    {"id": 1, "name": "Arsenal", "short_name": "ARS"},
    {"id": 2, "name": "Liverpool", "short_name": "LIV"},
]

EVENTS = [
    {"id": 7, "deadline_time": "2025-10-03T17:30:00Z", "is_current": True, "is_next": False},
    {"id": 8, "deadline_time": "2025-10-18T10:00:00Z", "is_current": False, "is_next": True},
    {"id": 9, "deadline_time": "2025-10-25T10:00:00Z", "is_current": False, "is_next": False},
]


def make_bootstrap(elements=None):
    return {
        "elements": elements if elements is not None else [make_player(1), make_player(2, team=2)],
        "teams": list(TEAMS),
        "events": list(EVENTS),
    }


class CountingFetcher:
    """Stands in for ProxyFetchClient; returns (or raises) queued outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def fetch(self, url, fmt="json", **kwargs):
        self.calls.append((url, fmt))
        outcome = self.outcomes[0] if len(self.outcomes) == 1 else self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def clock():
    return FakeClock()
