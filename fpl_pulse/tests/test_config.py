"""
Tests for configuration loading.
"""

import pytest

from fpl_pulse.src.common.config import Config, get_config


def test_missing_file_uses_defaults(tmp_path):
    config = Config(str(tmp_path / "settings.yaml"))

    assert config.get("cache.bootstrap_ttl_seconds") == 300
    assert config.get_proxy_prefixes()[0] == "https://api.allorigins.win/raw?url="
    assert len(config.get_feed_sources()) == 3
    assert config.get("does.not.exist", "fallback") == "fallback"


def test_file_values_merge_over_defaults(tmp_path):
    settings = tmp_path / "settings.yaml"
    settings.write_text("cache:\n  bootstrap_ttl_seconds: 60\napi:\n  proxy:\n    prefixes: ['https://only.test/?']\n")

    config = Config(str(settings))

    assert config.get("cache.bootstrap_ttl_seconds") == 60
    assert config.get("cache.serve_stale_on_error") is True
    assert config.get_proxy_prefixes() == ["https://only.test/?"]
    assert config.get("api.proxy.timeout") == 15


def test_overrides_argument(tmp_path):
    config = Config(str(tmp_path / "settings.yaml"), overrides={"news": {"max_articles": 5}})
    assert config.get("news.max_articles") == 5
    assert config.get("news.per_feed_limit") == 10


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("FPL_PULSE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FPL_PULSE_BASE_URL", "https://mirror.test/api")

    config = Config(str(tmp_path / "settings.yaml"))

    assert config.get("logging.level") == "DEBUG"
    assert config.get("api.fpl.base_url") == "https://mirror.test/api"


def test_invalid_yaml_raises(tmp_path):
    settings = tmp_path / "settings.yaml"
    settings.write_text("cache: [unclosed\n")

    with pytest.raises(ValueError):
        Config(str(settings))


def test_project_settings_file_loads():
    config = get_config()
    assert config.get("news.general_marker") == "Football"
    assert config.get("api.fpl.base_url").startswith("https://")
