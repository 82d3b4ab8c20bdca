"""Configuration for the chatter API client."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Base URL of the chatter server, without a trailing slash
    root_url: str = "http://localhost:4000"
    # Where the signed-in session's bearer token is persisted
    token_path: Path = Path.home() / ".chatter" / "token.json"
    timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CHATTER_CLIENT_",
        case_sensitive=False,
        extra="ignore",
    )
