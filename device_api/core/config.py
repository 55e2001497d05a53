# Standard library imports
import os
from typing import Final, List, Optional


STORE_BACKENDS = ("mongo", "memory")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults.
    """

    def __init__(self) -> None:
        # Storage Configuration
        self.device_store_backend: Final[str] = os.getenv("DEVICE_STORE_BACKEND", "mongo").strip().lower()
        if self.device_store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"DEVICE_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, "
                f"got '{self.device_store_backend}'"
            )

        # Database Configuration
        self.mongo_uri: Final[str] = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        self.mongo_database_name: Final[str] = os.getenv("MONGO_DB_NAME", "device_api")
        self.mongo_device_collection: Final[str] = os.getenv("MONGO_DEVICE_COLLECTION", "devices")
        self.mongo_timeout_ms: Final[int] = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

        # Mutation Configuration
        self.device_update_max_retries: Final[int] = int(os.getenv("DEVICE_UPDATE_MAX_RETRIES", "0"))
        if self.device_update_max_retries < 0:
            raise ValueError("DEVICE_UPDATE_MAX_RETRIES cannot be negative")

        # Server Configuration
        self.log_level: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_allow_origins: Final[List[str]] = _split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*"))


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment"""
    global _settings
    _settings = None
