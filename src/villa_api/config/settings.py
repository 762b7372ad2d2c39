from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import normalize_upper, normalize_lower

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    # Any SQLAlchemy async driver works; sqlite keeps local runs dependency-free.
    DB_DRIVER: str = "sqlite+aiosqlite"
    SQLITE_PATH: Path = Path("./villa.db")

    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "magic_villa"

    # Full URL wins over every other database setting when provided
    DATABASE_URL_OVERRIDE: str | None = None

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    DB_CREATE_ALL: bool = True

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/villa-api")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # Queue-backed logging
    LOG_USE_QUEUE: bool = False
    LOG_QUEUE_MAX_SIZE: int = 0
    LOG_QUEUE_BLOCKING: bool = False
    LOG_QUEUE_DROP_WARNING_THRESHOLD: int = 100

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the current environment.

        Resolution order:
        - `DATABASE_URL_OVERRIDE` when set.
        - SQLite file at `SQLITE_PATH` when `DB_DRIVER` is a sqlite driver.
        - Postgres built from the `POSTGRES_*` values; when `TESTING=True` and
          `TEST_POSTGRES_DB` is provided, the test database name is used so a
          test run never writes into the regular database.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        if self.DB_DRIVER.startswith("sqlite"):
            return f"{self.DB_DRIVER}:///{self.SQLITE_PATH}"

        db_name = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            db_name = self.TEST_POSTGRES_DB

        return (
            f"{self.DB_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{db_name}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs,
        so `LOG_LEVEL=debug` in the environment is accepted.
        """
        return normalize_upper(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return normalize_lower(v)

    # --- ConfigDict settings ---
    model_config = ConfigDict(
        # .env lives in the package root (src/villa_api/.env)
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Settings come from the environment only, so one cached instance per process is enough.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
