"""Application settings loaded from environment variables via pydantic-settings.

Values are read from, in priority order:

  1. Environment variables, e.g. ``CRON_SECRET=...``
  2. A ``.env`` file in the working directory (local development)
  3. The defaults below

Field names map to upper-cased env vars automatically
(``next_public_base_url`` → ``NEXT_PUBLIC_BASE_URL``).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """nextwipe application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Cron ===
    cron_secret: str = "dev-secret"
    # Base URL the cron job calls back into for the per-game refreshes.
    next_public_base_url: str = "http://localhost:8000"
    cron_concurrency: int = 8

    # === Browser ===
    # "development" launches a local Chromium with sandbox flags; anything
    # else uses the lean serverless launch profile.
    node_env: str = "production"
    chromium_executable_path: str = ""
    browser_timeout_ms: int = 30000

    # === Cache ===
    cache_dir: str = "cache"
    cache_backend: str = "file"  # "file" or "memory"

    # === Outbound HTTP ===
    http_timeout: float = 10.0
    http_user_agent: str = "NextWipeTime/1.0 (+https://nextwipetime.com)"
    reddit_min_interval: float = 2.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"
    config_path: str = "config/config.yaml"

    @property
    def is_browser_dev_mode(self) -> bool:
        return self.node_env.lower() == "development"

    def get_cors_origins(self) -> list[str]:
        """Split the comma-separated ``CORS_ORIGINS`` value."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
