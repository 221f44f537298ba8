from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from DEMO_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="DEMO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    log_level: str = "INFO"
    log_json: bool = True
    # prometheus exporter runs on its own port, never on the service routes
    metrics_port: Optional[int] = Field(default=None, ge=1, le=65535)


@lru_cache
def get_settings() -> Settings:
    return Settings()
