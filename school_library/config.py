import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    admin_api_key: str = os.getenv("ADMIN_API_KEY", "change-me-admin-key")

    # Google Books API settings
    google_books_api_key: Optional[str] = os.getenv("GOOGLE_BOOKS_API_KEY")
    google_books_base_url: str = os.getenv("GOOGLE_BOOKS_BASE_URL", "https://www.googleapis.com/books/v1")
    google_books_timeout: float = float(os.getenv("GOOGLE_BOOKS_TIMEOUT", "10"))
    google_books_language: str = os.getenv("GOOGLE_BOOKS_LANGUAGE", "id")
    google_books_max_results: int = int(os.getenv("GOOGLE_BOOKS_MAX_RESULTS", "10"))

    # Catalog settings
    seed_demo_data: bool = _env_flag("SEED_DEMO_DATA", "True")
    default_import_stock: int = int(os.getenv("DEFAULT_IMPORT_STOCK", "1"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "School Library")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    debug: bool = _env_flag("DEBUG", "False")

    # Feature flags
    enable_google_books: bool = _env_flag("ENABLE_GOOGLE_BOOKS", "True")


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
