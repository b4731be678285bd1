"""
Client Configuration — where the customer-facing flow finds the backend.
"""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Settings for the client flow, read from the environment."""

    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT_SECONDS: float = 30.0
    CHECKOUT_THEME_COLOR: str = "#8B5CF6"
    PREFERENCES_FILE: str = str(Path.home() / ".paydesk" / "preferences.json")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_client_settings() -> ClientSettings:
    return ClientSettings()
