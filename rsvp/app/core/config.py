"""Application configuration.

Defines `Settings` with environment variables (and an optional `.env` file).
"""
# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "RSVP Events"
    DEBUG: bool = False
    LOG_PATH: str = "logging"
    SECRET_KEY: str = "change-me-in-env"
    DATABASE_URL: str = "sqlite:///./rsvp.db"

    SESSION_TTL: int = 60 * 60 * 12  # 12h
    PASSWORD_MIN_LENGTH: int = 6

    DEFAULT_ERROR_MESSAGE: str = "The operation could not be completed."
    UNKNOWN_PARTICIPANT_LABEL: str = "Unidentified"


settings = Settings()
