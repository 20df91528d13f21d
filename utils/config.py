"""Configuration management utilities for the Region 1 project dashboard.

Provides:
- Config: base class that exposes its public settings as a dict
- AppConfig: data-service and client settings from APP_* environment variables
- MapSettings: map timing and zoom constants used by the controller
- KnownValues: canonical province and status names
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any
import os as _os


class Config:
    """Base configuration class for organizing application settings."""

    def __init__(self):
        """Initialize configuration with default values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}


class KnownValues:
    """Canonical values for Region 1 data."""

    PROVINCES = ("Ilocos Norte", "Ilocos Sur", "La Union", "Pangasinan")

    STATUSES = ("Completed", "Ongoing", "Processing", "Terminated")

    @classmethod
    def is_known_province(cls, province: str) -> bool:
        return province in cls.PROVINCES

    @classmethod
    def is_known_status(cls, status: str) -> bool:
        return status in cls.STATUSES


@dataclass
class MapSettings:
    """Timing and zoom constants for the map controller.

    Delays are in seconds.
    """

    focus_delay: float = 0.3
    popup_reopen_delay: float = 0.15
    unlock_guard: float = 0.5
    min_zoom: float = 8
    max_zoom: float = 14
    excluded_statuses: tuple = ("Processing",)


class AppConfig(Config):
    """Application-level configuration loaded from environment variables.

    All env vars have sensible defaults so the application works out of the
    box without any configuration.

    Environment variables:
        APP_DB_PATH: Path to the SQLite database file (default: projects.sqlite)
        APP_PORT: API server port (default: 5000)
        APP_HOST: API server bind address (default: 127.0.0.1)
        APP_LOG_FORMAT: Logging format, "text" or "json" (default: text)
        APP_CORS_ORIGINS: Comma-separated allowed origins (default: *)
        APP_API_BASE_URL: Data service base URL used by the client
            (default: http://localhost:5000/api)
        APP_HTTP_TIMEOUT: Client request timeout in seconds (default: 10)
        APP_HTTP_RETRIES: Client retry attempts (default: 0)
    """

    def __init__(self) -> None:
        super().__init__()
        self.db_path = Path(_os.getenv("APP_DB_PATH", "projects.sqlite"))
        self.api_port = int(_os.getenv("APP_PORT", "5000"))
        self.api_host = _os.getenv("APP_HOST", "127.0.0.1")
        self.log_format = _os.getenv("APP_LOG_FORMAT", "text")
        raw_origins = _os.getenv("APP_CORS_ORIGINS", "*")
        self.cors_origins: list[str] = (
            ["*"] if raw_origins == "*"
            else [o.strip() for o in raw_origins.split(",") if o.strip()]
        )
        self.api_base_url = _os.getenv("APP_API_BASE_URL", "http://localhost:5000/api")
        self.http_timeout = float(_os.getenv("APP_HTTP_TIMEOUT", "10"))
        self.http_retries = int(_os.getenv("APP_HTTP_RETRIES", "0"))

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create an AppConfig instance populated from environment variables."""
        return cls()

