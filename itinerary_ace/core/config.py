from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


ALLOWED_RATE_PROVIDERS = {"static", "external-http"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic-settings rules (e.g., APP_NAME,
    DEBUG, DATA_DIR, DB_FILENAME, EXCHANGE_RATE_PROVIDER, OPENROUTER_API_KEY).
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Basic app metadata
    app_name: str = "Itinerary Ace"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "itinerary_ace.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    seed_demo_data: bool = True

    # Exchange rates
    # Allowed: 'static' (built-in USD based table), 'external-http' (ExchangeRate-API v6)
    exchange_rate_provider: str = "static"
    exchangerate_api_key: Optional[str] = None
    exchangerate_api_base_url: AnyHttpUrl = "https://v6.exchangerate-api.com/v6"
    http_timeout_seconds: float = 10.0

    # Hosted LLM endpoint (OpenRouter chat completions)
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: AnyHttpUrl = "https://openrouter.ai/api/v1"
    openrouter_http_referer: Optional[str] = None
    openrouter_x_title: Optional[str] = None
    image_model: str = "google/gemma-3n-e4b-it:free"
    contract_model: str = "google/gemma-3-27b-it:free"
    activity_model: str = "google/gemma-3n-e4b-it:free"

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
