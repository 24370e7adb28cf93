"""Configuration management using environment variables"""
import os
import logging
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./user_service.db"


class Settings:
    """Application settings read from the environment"""

    def __init__(self):
        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development")

        # Database configuration (SQLite by default - any async SQLAlchemy URL works)
        if self.environment == "production":
            self.database_url = self._get_required("DATABASE_URL")
        else:
            self.database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
            if self.database_url == DEFAULT_DATABASE_URL:
                logging.getLogger(__name__).info(
                    "Using local SQLite database. Set DATABASE_URL in .env to use another database."
                )

        # Server configuration
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8000"))

        # CORS origins (comma-separated list)
        self.cors_origins = os.getenv("CORS_ORIGINS", "")

        # User cache (lookups by id/email/phone)
        self.user_cache_ttl_hours = float(os.getenv("USER_CACHE_TTL_HOURS", "1"))
        self.user_cache_max_size = int(os.getenv("USER_CACHE_MAX_SIZE", "10000"))

        # Pagination
        self.default_page_size = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
        self.max_page_size = int(os.getenv("MAX_PAGE_SIZE", "100"))
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"DEFAULT_PAGE_SIZE ({self.default_page_size}) cannot exceed "
                f"MAX_PAGE_SIZE ({self.max_page_size})"
            )

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def _get_required(self, key: str) -> str:
        """Read an environment variable that must be set in production"""
        value = os.getenv(key, "").strip()
        if value:
            return value
        raise ValueError(f"{key} must be set when ENVIRONMENT={self.environment}")


# Shared by the API, the CLI and the cache factory
settings = Settings()
