"""
HackOps – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App ──
    APP_NAME: str = "HackOps"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./hackops.db"
    SQL_ECHO: bool = False
    # Seconds a SQLite writer waits for the database lock before failing.
    SQLITE_BUSY_TIMEOUT: float = 30.0

    # ── JWT ──
    SECRET_KEY: str = "change-me-to-a-random-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # ── Codes ──
    CODE_GENERATION_ATTEMPTS: int = 8

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _norm_log_level(cls, v):
        s = ("" if v is None else str(v)).strip().upper()
        return s or "INFO"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"


settings = Settings()
