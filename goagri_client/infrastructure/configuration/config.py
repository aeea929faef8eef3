"""
Configuration management for the GoAgri client engine
"""


import threading

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Gateway configuration
    api_url: str = Field(
        default="http://192.168.100.196:5000/api",
        description="Base URL of the commerce backend API",
        min_length=1,
    )
    request_timeout_seconds: float = Field(
        default=30.0, description="Gateway request timeout", gt=0
    )

    # Local store configuration
    store_url: str = Field(
        default="sqlite:///goagri_client.db",
        description="SQLAlchemy URL of the device-local key-value store",
    )

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="logs", description="Directory for log files")
    environment: str = Field(
        default="development", description="Application environment"
    )

    # Checkout settings
    currency: str = Field(default="PHP", description="Currency code")
    pickup_address: str = Field(
        default="Poblacion 1, Moncada\nTarlac, Philippines",
        description="Store address sent for pickup orders",
    )


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_config() -> Settings:
    """Get the global settings instance, ensuring thread safety."""
    global _settings_instance
    if _settings_instance is None:
        with _settings_lock:
            if _settings_instance is None:
                _settings_instance = Settings()
    return _settings_instance


def reset_config() -> None:
    """Drop the cached settings so the next get_config() re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None
