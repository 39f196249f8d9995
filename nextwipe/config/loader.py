"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

  1. ``DEFAULT_GAMES`` in :mod:`nextwipe.config.games` -- the built-in table
  2. ``config/config.yaml`` -- checked-in overrides (release hours, windows)
  3. ``.env`` / environment variables via :class:`Settings`, for the
     fields actually set there (Settings defaults never override YAML)

``_deep_merge`` merges nested dicts recursively::

    base = {"games": {"apex": {"max_days": 120}}}
    overrides = {"games": {"apex": {"release_hour_utc": 18}}}
    result = {"games": {"apex": {"max_days": 120, "release_hour_utc": 18}}}
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from nextwipe.config.games import DEFAULT_GAMES, GameProfile
from nextwipe.config.settings import Settings
from nextwipe.utils.errors import ConfigurationError

# (yaml section, yaml key) -> Settings field
_ENV_FIELDS = {
    ("app", "host"): "app_host",
    ("app", "port"): "app_port",
    ("app", "env"): "app_env",
    ("cache", "dir"): "cache_dir",
    ("cache", "backend"): "cache_backend",
    ("cron", "base_url"): "next_public_base_url",
    ("cron", "concurrency"): "cron_concurrency",
    ("logging", "level"): "log_level",
}


def load_config(path: str | None = None, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file. Defaults to
            ``settings.config_path``.
        settings: Settings instance; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.config_path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

    _deep_merge(yaml_config, _env_overrides(settings))
    return yaml_config


def _env_overrides(settings: Settings) -> dict:
    """Nest the explicitly set Settings fields under their YAML sections.

    Fields left at their defaults are skipped so they never override
    config.yaml.
    """
    overrides: dict = {}
    for (section, key), field in _ENV_FIELDS.items():
        if field in settings.model_fields_set:
            overrides.setdefault(section, {})[key] = getattr(settings, field)
    return overrides


def load_game_profiles(config: dict | None = None) -> dict[str, GameProfile]:
    """Return the game table with ``games:`` overrides from *config* applied.

    Unknown game ids in the overrides are rejected so typos surface at
    startup rather than as a silently ignored setting.
    """
    overrides = (config or {}).get("games") or {}
    if not isinstance(overrides, dict):
        raise ConfigurationError("'games' must be a mapping of game id to overrides")

    profiles = dict(DEFAULT_GAMES)
    for game_id, fields in overrides.items():
        if game_id not in profiles:
            raise ConfigurationError(f"Unknown game '{game_id}' in games config")
        if not fields:
            continue
        merged = profiles[game_id].model_dump()
        _deep_merge(merged, dict(fields))
        try:
            profiles[game_id] = GameProfile(**merged)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid settings for game '{game_id}': {exc}") from exc
    return profiles


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
