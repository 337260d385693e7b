"""Application configuration and settings."""
import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class Settings:
    """Application settings loaded from environment variables."""

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./db/mapty.db")

    # Durable storage key the workout blob is written under
    STORAGE_KEY: str = os.getenv("STORAGE_KEY", "workouts")

    # Map Configuration
    DEFAULT_ZOOM: int = int(os.getenv("DEFAULT_ZOOM", "13"))
    HOME_LATITUDE: Optional[float] = _optional_float("HOME_LATITUDE")
    HOME_LONGITUDE: Optional[float] = _optional_float("HOME_LONGITUDE")

    # Application Configuration
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def home_location(self) -> Optional[tuple]:
        """Configured (lat, lng) pair, or None when either half is missing."""
        if self.HOME_LATITUDE is None or self.HOME_LONGITUDE is None:
            return None
        return (self.HOME_LATITUDE, self.HOME_LONGITUDE)


settings = Settings()
