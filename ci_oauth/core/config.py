"""
Configuration models and helpers.

Centralizes settings management so both command-line tools share a
consistent configuration surface. Every value has a default matching the
hosted provider, so a bare CI runner needs no extra environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_SETTINGS_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class OAuthSettings(BaseSettings):
    """Token endpoint and client registration details."""

    model_config = _SETTINGS_CONFIG

    token_url: str = Field(
        "https://console.anthropic.com/v1/oauth/token",
        validation_alias="OAUTH_TOKEN_URL",
    )
    client_id: str = Field(
        "9d1c250a-e61b-44d9-88ed-5944d1962f5e",
        validation_alias="OAUTH_CLIENT_ID",
    )
    redirect_uri: str = Field(
        "https://console.anthropic.com/oauth/code/callback",
        validation_alias="OAUTH_REDIRECT_URI",
    )
    default_scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("user:inference", "user:profile"),
        validation_alias="OAUTH_DEFAULT_SCOPES",
        description="Scopes recorded when the provider omits the scope field.",
    )
    refresh_buffer_minutes: int = Field(
        60,
        ge=0,
        validation_alias="OAUTH_REFRESH_BUFFER_MINUTES",
        description="Refresh this long before the access token actually expires.",
    )

    @field_validator("default_scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())

    @property
    def refresh_buffer_ms(self) -> int:
        return self.refresh_buffer_minutes * 60 * 1000


class StorageSettings(BaseSettings):
    """Locations of the files shared between pipeline steps."""

    model_config = _SETTINGS_CONFIG

    state_file: Path = Field(
        Path("claude_oauth_state.json"),
        validation_alias="OAUTH_STATE_FILE",
        description="PKCE state written by the login start step.",
    )
    credentials_file: Path = Field(
        Path("credentials.json"),
        validation_alias="CREDENTIALS_FILE",
    )


class CIOutputSettings(BaseSettings):
    """GitHub Actions integration."""

    model_config = _SETTINGS_CONFIG

    github_output: Optional[Path] = Field(
        None,
        validation_alias="GITHUB_OUTPUT",
        description="Step output file. Falls back to set-output commands when unset.",
    )

    @field_validator("github_output", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AppSettings(BaseSettings):
    """Root settings object for the command-line tools."""

    model_config = _SETTINGS_CONFIG

    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ci_output: CIOutputSettings = Field(default_factory=CIOutputSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "CIOutputSettings",
    "OAuthSettings",
    "StorageSettings",
    "get_settings",
]
