"""Client configuration using Pydantic Settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEFACTUUR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_url: str = "https://app.defactuur.be/api"
    api_version: str = "v1"
    api_token: Optional[str] = None

    # Transport
    timeout: float = 30.0  # seconds
    user_agent: str = ""

    debug: bool = False


# Create settings instance
settings = Settings()
