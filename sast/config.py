"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration shared by the dashboard client and the reference server."""

    project_name: str = Field(default="SAST Analytics", description="Human readable name.")

    # Client side
    api_base_url: str = Field(
        default="http://127.0.0.1:8000/api",
        description="Root of the remote analytics and auth endpoints.",
    )
    request_timeout: float = Field(
        default=5.0, description="Transport-level timeout in seconds. No retries are made."
    )
    state_file: Optional[Path] = Field(
        default=None,
        description=(
            "JSON file persisting the theme and session token. Only for single-user "
            "deployments; when unset each browser session keeps its own state in memory."
        ),
    )

    # Server side
    database_path: Path = Field(
        default=Path("sast_auth.sqlite"), description="sqlite file holding users and sessions."
    )
    session_ttl_hours: int = Field(default=24, description="Lifetime of an issued session token.")
    min_password_length: int = Field(default=6, description="Minimum accepted password length.")
    allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:8501",
            "http://127.0.0.1:8501",
        ],
        description="List of origins allowed for CORS.",
    )

    log_level: str = Field(default="INFO", description="Root log level.")

    model_config = SettingsConfigDict(
        env_prefix="SAST_",
        extra="ignore",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
