"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Seat Booking API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage: one SQLite file per flight partition lives under DATA_DIR
    DATA_DIR: str = "./data"
    DATABASE_ECHO: bool = False

    # Seat layout seeded into every new partition
    SEAT_ROWS: int = Field(default=10, gt=0)
    SEAT_COLUMNS: int = Field(default=6, gt=0, le=26)

    # Live subscribers
    SNAPSHOT_ON_CONNECT: bool = False
    SUBSCRIBER_SEND_TIMEOUT: float = Field(default=5.0, gt=0)

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
