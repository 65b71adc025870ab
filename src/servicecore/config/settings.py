from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Every service built on servicecore reads the same knobs; per-service values
    (SERVICE_NAME, POSTGRES_DB, ...) come from that service's environment or `.env`.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"
    SERVICE_NAME: str = "servicecore"

    # Database configuration
    POSTGRES_DRIVER: str = "asyncpg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "servicecore"

    # Full URL override (CI, tests, non-Postgres stores)
    DATABASE_URL_OVERRIDE: str | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/servicecore")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # Pagination bounds shared by every repository
    PAGINATION_DEFAULT_LIMIT: int = 20
    PAGINATION_MAX_LIMIT: int = 100

    # Error rendering; tracebacks in error envelopes are opt-in for local debugging
    INCLUDE_ERROR_STACK: bool = False

    # Request bodies above this size are rejected with 413
    MAX_BODY_BYTES: int = 1_048_576

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL.

        `DATABASE_URL_OVERRIDE` wins when set; otherwise the URL is assembled
        from the POSTGRES_* pieces.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs,
        so `LOG_LEVEL=debug` is accepted.
        """
        return v.upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize LOG_FORMAT to lowercase.
        """
        return v.lower() if isinstance(v, str) else v

    @field_validator("PAGINATION_MAX_LIMIT", "PAGINATION_DEFAULT_LIMIT")
    def positive_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("pagination limits must be >= 1")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# get_settings() takes no arguments and always returns the same settings from the environment,
# so caching it with @lru_cache() avoids re-reading the environment on every call.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
