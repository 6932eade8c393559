from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from sqlalchemy.engine import URL
from ..validators.config_validators import upper_stripped, lower_stripped, blank_to_none


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Database variables keep the names the deployment already exports
    (DB_HOST, DB_USER, DB_PASSWORD, DB_NAME, DB_PORT).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    DB_DIALECT: str = "mysql"
    DB_DRIVER: str = "aiomysql"
    DB_HOST: str = "localhost"
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "tccecossistemaescolar"
    DB_PORT: int = 3306

    # Full SQLAlchemy URL; when set it replaces the DB_* parts above
    # (e.g. sqlite+aiosqlite:///./escolas.db for a local run)
    DB_URL: str | None = None

    # Connection pool: excess checkouts wait in line (no timeout) instead of failing
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: float | None = None

    # Create missing tables on startup
    DB_CREATE_TABLES: bool = True

    # Test database configuration
    TEST_DB_NAME: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/escolas")
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
    def database_name(self) -> str:
        """
        The database to connect to: TEST_DB_NAME when TESTING is on and a test
        database is configured, DB_NAME otherwise.
        """
        if self.TESTING and self.TEST_DB_NAME:
            return self.TEST_DB_NAME
        return self.DB_NAME

    @property
    def DATABASE_URL(self) -> str:
        """
        Return the SQLAlchemy connection URL, e.g.
        ``mysql+aiomysql://root:@localhost:3306/tccecossistemaescolar``.

        Credentials are escaped by ``URL.create`` so passwords containing
        '@' or '/' do not break the URL. DB_URL, when set, is returned as is.
        """
        if self.DB_URL:
            return self.DB_URL

        url = URL.create(
            drivername=f"{self.DB_DIALECT}+{self.DB_DRIVER}",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.database_name,
        )
        return url.render_as_string(hide_password=False)

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase so `LOG_LEVEL=debug` is accepted.
        """
        return upper_stripped(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return lower_stripped(v)

    @field_validator("TEST_DB_NAME", "DB_POOL_TIMEOUT", "DB_URL", mode="before")
    def empty_as_unset(cls, v):
        return blank_to_none(v)

    model_config = SettingsConfigDict(
        # .env next to the package root (src/escolas/.env)
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
