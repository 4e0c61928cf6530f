from typing import Optional, List, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path

# Define the root directory of the tweet_video_api service
SERVICE_ROOT_DIR = Path(__file__).parent.parent.resolve()
# Path to the repository root (two levels up from this settings.py)
PROJECT_ROOT_DIR = SERVICE_ROOT_DIR.parent

SUPPORTED_BACKENDS = ("memory", "sqlite", "postgres", "hosted")


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Twitter Video Download API"
    APP_VERSION: str = "2.0"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000

    # Security settings
    CORS_ORIGINS: Union[str, List[str]] = "*"
    ADMIN_KEY: Optional[str] = None
    # Take the origin from X-Forwarded-For / X-Real-IP. Disable unless a trusted proxy sets them.
    TRUST_PROXY_HEADERS: bool = True

    # Storage settings. "auto" selects postgres when DATABASE_URL is set, memory otherwise.
    STORE_BACKEND: str = "auto"
    DATABASE_URL: Optional[str] = None
    SQLITE_PATH: str = str(PROJECT_ROOT_DIR / "data" / "tweet_video_api.db")
    HOSTED_URL: Optional[str] = None
    HOSTED_KEY: Optional[str] = None
    HOSTED_TIMEOUT_SECONDS: float = 10.0

    # Upstream scraping target
    TWITSAVE_BASE_URL: str = "https://twitsave.com"
    FETCH_TIMEOUT_SECONDS: float = 15.0

    # Retention and view sizes
    REQUEST_LOG_RETENTION: int = 1000
    STATS_TOP_N: int = 10
    RECENT_REQUESTS_LIMIT: int = 50
    ADMIN_LOG_LINES: int = 150

    # Logging configuration path (can be overridden by env var)
    LOGGING_CONFIG_PATH: str = str(SERVICE_ROOT_DIR / "config" / "logging_config.yaml")

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT_DIR / ".env"),  # Load variables from project root .env
        env_file_encoding='utf-8',
        extra='ignore'
    )

    @field_validator("DATABASE_URL", mode='before')
    @classmethod
    def normalize_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Rewrite plain driver URLs to their async SQLAlchemy equivalents."""
        if not v:
            return None
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://") and not v.startswith("sqlite+aiosqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("STORE_BACKEND", mode='before')
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        value = (v or "auto").strip().lower()
        if value == "postgresql":
            value = "postgres"
        if value != "auto" and value not in SUPPORTED_BACKENDS:
            raise ValueError(f"STORE_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)} or 'auto'")
        return value

    def model_post_init(self, __context) -> None:
        """Parse comma-separated strings into lists after model initialization."""
        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = [origin.strip() for origin in self.CORS_ORIGINS.split(',') if origin.strip()]

    @property
    def resolved_backend(self) -> str:
        """The storage backend that will actually be used."""
        if self.STORE_BACKEND != "auto":
            return self.STORE_BACKEND
        return "postgres" if self.DATABASE_URL else "memory"

    @property
    def sql_database_url(self) -> Optional[str]:
        """Async SQLAlchemy URL for the SQL backends, or None if it cannot be determined."""
        backend = self.resolved_backend
        if backend == "sqlite":
            if self.DATABASE_URL and self.DATABASE_URL.startswith("sqlite"):
                return self.DATABASE_URL
            return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"
        if backend == "postgres":
            return self.DATABASE_URL
        return None

    def startup_warnings(self) -> List[str]:
        """
        List configuration problems that should be reported loudly at startup.

        Returns:
            List[str]: Human-readable warnings, empty when the configuration is complete.
        """
        warnings: List[str] = []
        if not self.ADMIN_KEY:
            warnings.append("ADMIN_KEY is not set; every administrative endpoint will answer 401.")
        backend = self.resolved_backend
        if backend == "postgres" and not self.DATABASE_URL:
            warnings.append("STORE_BACKEND=postgres but DATABASE_URL is not set.")
        if backend == "hosted" and not (self.HOSTED_URL and self.HOSTED_KEY):
            warnings.append("STORE_BACKEND=hosted but HOSTED_URL and/or HOSTED_KEY are not set.")
        if backend == "memory" and not self.DEBUG:
            warnings.append("Using the in-memory store; all data is lost when the process exits.")
        return warnings


# Instantiate settings
settings = Settings()
