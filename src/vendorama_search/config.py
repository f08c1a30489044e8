"""Configuration for the Vendorama search client."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment."""

    api_base_url: str = "https://www.vendorama.co.nz/app/ios/1/"
    api_key: SecretStr = SecretStr("")
    environment: str = "development"
    request_timeout: float = 30.0

    # Infinite scroll asks for the next page this many items before the end.
    scroll_lookahead: int = Field(default=6, ge=0)
    max_query_length: int = Field(default=100, ge=1)
    suggestion_limit: int = Field(default=12, ge=0)
    debug_logging: bool = False

    model_config = SettingsConfigDict(env_prefix="VENDORAMA_", env_file=".env")
