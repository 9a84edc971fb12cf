"""Configuration management from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

from azanbot.utils.errors import ConfigurationError

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", os.getenv("BOT_TOKEN", ""))

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/azanbot.db"))

    # Location lookup
    NOMINATIM_URL: str = os.getenv(
        "NOMINATIM_URL", "https://nominatim.openstreetmap.org/search"
    )
    TIMEZONEDB_URL: str = os.getenv(
        "TIMEZONEDB_URL", "http://api.timezonedb.com/v2.1/get-time-zone"
    )
    TIMEZONEDB_API_KEY: str = os.getenv("TIMEZONEDB_API_KEY", "")
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "10"))
    HTTP_USER_AGENT: str = os.getenv("HTTP_USER_AGENT", "azanbot/1.0")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Scheduler
    SCHEDULER_INTERVAL: int = int(os.getenv("SCHEDULER_INTERVAL", "60"))
    SCHEDULER_CONCURRENCY: int = int(os.getenv("SCHEDULER_CONCURRENCY", "20"))

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.TELEGRAM_BOT_TOKEN:
            raise ConfigurationError("TELEGRAM_BOT_TOKEN environment variable is required")

        if cls.SCHEDULER_CONCURRENCY < 1:
            raise ConfigurationError("SCHEDULER_CONCURRENCY must be at least 1")

        # Ensure database directory exists
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
