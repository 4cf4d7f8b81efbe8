# phm/core/settings.py
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_ENV: Literal["development", "test", "production"] = "development"
    PUBLIC_BASE_URL: str = "http://localhost:5173"

    # --- Database ---
    DATABASE_URL: str = "sqlite:///./phm.db"

    # --- Auth ---
    # No defaults: the app refuses to start without signing secrets
    JWT_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ACCESS_EXPIRES_MINUTES: int = 15
    JWT_REFRESH_EXPIRES_DAYS: int = 7
    COOKIE_SECURE: bool = False
    AUTH_RATE_LIMIT: str = "20/minute"

    # --- HTTP ---
    CORS_ORIGIN: str = "http://localhost:5173"

    # --- Storage ---
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_MB: int = 25

    # --- Quotes ---
    DEFAULT_TAX_RATE: int = 20
    QUOTE_STRICT_TRANSITIONS: bool = False

    # --- Transcription ---
    TRANSCRIPTION_HEARTBEAT_SECONDS: float = 30.0

    # --- Observability ---
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()  # reads env + .env
