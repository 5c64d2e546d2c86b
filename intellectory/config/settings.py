"""
Application settings.

Everything is read from the environment (or a `.env` file) through
pydantic-settings; each group below has its own prefix, e.g.
`STORAGE_BACKEND=rest` or `LLM_PROVIDER=ollama`.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Provider used to interpret free-text commands."""

    model_config = SettingsConfigDict(env_prefix="LLM_")

    provider: Literal["gemini", "ollama"] = "gemini"
    model_name: str = "gemini-2.5-flash"
    api_key: str | None = None
    host: str = "https://generativelanguage.googleapis.com"
    ollama_host: str = "http://localhost:11434"
    timeout: int = Field(60, gt=0, description="Seconds per request")
    max_tokens: int = Field(2048, gt=0)
    temperature: float = Field(0.1, ge=0.0, le=2.0)

    # breaker
    failure_threshold: int = Field(3, ge=1)
    cooldown_seconds: int = Field(60, ge=0)

    # retries of timeouts and 5xx replies
    max_retries: int = Field(3, ge=1, description="Attempts per call, including the first")
    retry_delay: float = Field(1.0, ge=0.0)
    retry_multiplier: float = Field(2.0, ge=1.0)

    warmup_on_start: bool = False


class StorageSettings(BaseSettings):
    """Where team data lives: a local SQLite file or a hosted REST table API."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "rest"] = "sqlite"

    data_dir: Path = Path("data")
    db_name: str = "intellectory.db"
    pool_size: int = Field(5, ge=1)
    busy_timeout: int = Field(30000, ge=0, description="Milliseconds to wait on a locked database")

    rest_url: str | None = None
    rest_key: str | None = None
    rest_timeout: float = Field(15.0, gt=0)

    retry_attempts: int = Field(3, ge=1)
    retry_base_delay: float = Field(0.3, ge=0.0)

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def rest_configured(self) -> bool:
        return bool(self.rest_url and self.rest_key)


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AUTH_")

    user_header: str = "X-User-ID"
    session_check_timeout: float = Field(5.0, gt=0, description="Seconds before a session lookup gives up")


class BinSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BINS_")

    history_limit: int = Field(200, ge=1)
    notes_debounce_seconds: float = Field(1.0, ge=0.0)
    seed_default_types: bool = True


class StockSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOCK_")

    price_tolerance: float = Field(0.001, ge=0.0, description="Price change below this needs no confirmation")
    default_alert_level: float = Field(100, ge=0)
    supplier_match_distance: int = Field(3, ge=0, description="Max edit distance for a supplier name match")


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """All settings groups plus service identity."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Intellectory"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    llm: LLMSettings = Field(default_factory=LLMSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    bins: BinSettings = Field(default_factory=BinSettings)
    stock: StockSettings = Field(default_factory=StockSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def create_data_dir(self) -> "Settings":
        if self.storage.backend == "sqlite":
            self.storage.data_dir.mkdir(parents=True, exist_ok=True)
        return self


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the loaded settings so the next call re-reads the environment."""
    global _settings
    _settings = None
