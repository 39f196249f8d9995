"""Unit tests for settings, the game table and the YAML loader."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from nextwipe.config.games import CRON_GAMES, DEFAULT_GAMES
from nextwipe.config.loader import load_config, load_game_profiles
from nextwipe.config.settings import Settings
from nextwipe.utils.errors import ConfigurationError


class TestGameTable:
    def test_every_cron_game_has_a_profile(self) -> None:
        assert set(CRON_GAMES) == set(DEFAULT_GAMES)
        assert len(CRON_GAMES) == 19

    def test_cache_keys(self) -> None:
        assert DEFAULT_GAMES["rust"].cache_key == "rust-wipe"
        assert DEFAULT_GAMES["poe2"].cache_key == "poe2-league"
        assert DEFAULT_GAMES["lastepoch"].cache_key == "lastepoch-cycle"

    def test_event_titles(self) -> None:
        assert DEFAULT_GAMES["poe"].event_title == "New League"
        assert DEFAULT_GAMES["diablo4"].event_title == "New Season"
        assert DEFAULT_GAMES["diablo4"].event_kind == "season"
        assert DEFAULT_GAMES["lastepoch"].event_title == "New Cycle"
        assert DEFAULT_GAMES["rust"].event_title == "Wipe"

    def test_previous_steps_back_one_cycle(self) -> None:
        profile = DEFAULT_GAMES["diablo4"]
        assert profile.previous(datetime(2025, 12, 9, 18, tzinfo=timezone.utc)) == datetime(
            2025, 9, 9, 18, tzinfo=timezone.utc
        )

    def test_advance_past(self) -> None:
        profile = DEFAULT_GAMES["apex"]
        anchor = datetime(2025, 1, 1, tzinfo=timezone.utc)
        now = datetime(2025, 6, 10, tzinfo=timezone.utc)
        result = profile.advance_past(anchor, now)
        assert result > now
        assert (result - anchor).days % 90 == 0


class TestLoadGameProfiles:
    def test_no_overrides_returns_defaults(self) -> None:
        assert load_game_profiles({}) == DEFAULT_GAMES

    def test_override_merges_fields(self) -> None:
        profiles = load_game_profiles({"games": {"apex": {"release_hour_utc": 18}}})
        assert profiles["apex"].release_hour_utc == 18
        assert profiles["apex"].max_days == DEFAULT_GAMES["apex"].max_days
        assert DEFAULT_GAMES["apex"].release_hour_utc == 17

    def test_unknown_game_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown game 'minecraft'"):
            load_game_profiles({"games": {"minecraft": {"release_hour_utc": 1}}})

    def test_invalid_value_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            load_game_profiles({"games": {"rust": {"release_hour_utc": 30}}})


class TestLoadConfig:
    def test_yaml_and_env_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n  backend: file\ngames:\n  valorant:\n    release_hour_utc: 20\n")
        settings = Settings(cache_backend="memory", next_public_base_url="https://example.test")

        config = load_config(str(path), settings=settings)

        assert config["cache"]["backend"] == "memory"
        assert config["cron"]["base_url"] == "https://example.test"
        assert config["games"]["valorant"]["release_hour_utc"] == 20

    def test_yaml_values_survive_unset_settings(self, tmp_path: Path, monkeypatch) -> None:
        for name in ("CACHE_DIR", "CACHE_BACKEND", "CRON_CONCURRENCY", "NEXT_PUBLIC_BASE_URL"):
            monkeypatch.delenv(name, raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n  dir: /var/cache/nextwipe\n  backend: memory\ncron:\n  concurrency: 3\n")

        config = load_config(str(path), settings=Settings(_env_file=None))

        assert config["cache"] == {"dir": "/var/cache/nextwipe", "backend": "memory"}
        assert config["cron"] == {"concurrency": 3}

    def test_env_variable_overrides_yaml(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("CRON_CONCURRENCY", "12")
        path = tmp_path / "config.yaml"
        path.write_text("cron:\n  concurrency: 3\n")

        config = load_config(str(path), settings=Settings(_env_file=None))

        assert config["cron"]["concurrency"] == 12

    def test_missing_file_is_empty_config(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=Settings(log_level="DEBUG"))
        assert "games" not in config
        assert config["logging"]["level"] == "DEBUG"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("games: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=Settings())

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=Settings())


class TestSettings:
    def test_cors_origins_split(self) -> None:
        settings = Settings(cors_origins="https://a.test, https://b.test,")
        assert settings.get_cors_origins() == ["https://a.test", "https://b.test"]

    def test_browser_dev_mode(self) -> None:
        assert Settings(node_env="development").is_browser_dev_mode is True
        assert Settings(node_env="production").is_browser_dev_mode is False
