"""Configuration module: Settings, the game table, loaders and a settings singleton."""

from nextwipe.config.games import CRON_GAMES, DEFAULT_GAMES, GameProfile
from nextwipe.config.loader import load_config, load_game_profiles
from nextwipe.config.settings import Settings

settings = Settings()

__all__ = [
    "CRON_GAMES",
    "DEFAULT_GAMES",
    "GameProfile",
    "Settings",
    "load_config",
    "load_game_profiles",
    "settings",
]
