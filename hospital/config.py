import sys

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HOSPITAL_DB_", env_file=".env", extra="ignore")

    url: str = "sqlite:///hospital.db"
    echo: bool = False


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HOSPITAL_", env_file=".env", extra="ignore")

    clinic_timezone: str = "America/Guatemala"
    log_level: str = "INFO"
    database: DatabaseConfig = Field(default_factory=lambda: DatabaseConfig())


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
