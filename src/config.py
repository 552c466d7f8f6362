"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "Mood Cycle"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Mood model ---
    mood_model_path: str | None = None  # override for the bundled mood_model.yaml

    # --- Rate Limiting ---
    rate_limit_per_minute: int = 60
    rate_limit_window_seconds: int = 60
    rate_limit_trust_forwarded_for: bool = False  # only behind a proxy that sets X-Forwarded-For

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
