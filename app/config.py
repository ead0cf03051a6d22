from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str = "postgresql://localhost:5432/datekeeper"

    # Cron trigger shared secret (Authorization: Bearer <CRON_SECRET>)
    CRON_SECRET: str | None = None

    # Outbound email (Resend)
    RESEND_API_KEY: str | None = None
    RESEND_API_URL: str = "https://api.resend.com"
    EMAIL_FROM: str = "DateKeeper <noreply@resend.dev>"

    # =================================================================
    # REMINDER PIPELINE SETTINGS
    # =================================================================
    REMINDER_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    REMINDER_BACKOFF_BASE_MS: int = Field(default=1000, ge=0)
    REMINDER_MAX_CONCURRENT_DISPATCHES: int = Field(default=1, ge=1)  # 1 = sequential dispatch
    REMINDER_SEND_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 5
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def backoff_base_seconds(self) -> float:
        """Base retry delay for reminder dispatch, in seconds."""
        return self.REMINDER_BACKOFF_BASE_MS / 1000

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            # The reminder run is the only heavy reader; keep dev pools tiny
            config.update({"min_size": 1, "max_size": 3, "timeout": 15.0})

        return config


settings = Settings()
