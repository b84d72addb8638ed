"""Configuration management for the retry engine and OAuth helpers."""

from datetime import datetime
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OAUTH2_CALLBACK_PATH = "/oauth2Callback"


class Settings(BaseSettings):
    """Service settings loaded from environment variables.

    Settings are passed explicitly to the components that need them; there is
    no process-wide instance.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # OAuth callback location
    client_url: str = Field(
        default="http://localhost",
        description="Public base URL of this service, used to build the OAuth callback URL",
    )
    port: int = Field(default=8090, description="Public port of this service")
    oauth_redirect_url: str | None = Field(
        default=None,
        description="Explicit OAuth redirect URI. Overrides {client_url}:{port}/oauth2Callback. "
        "Accepts OAUTH_REDIRECT_URL or JIVE_REDIRECT.",
        validation_alias=AliasChoices("oauth_redirect_url", "jive_redirect"),
    )

    # Transport
    request_timeout: float = Field(
        default=30.0, description="Timeout in seconds for each HTTP exchange"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / ".oauth_retry" / "logs",
        description="Directory for log files",
    )

    @field_validator("client_url")
    @classmethod
    def validate_client_url(cls, v: str) -> str:
        """Validate that client_url is an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("client_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        """Validate that the timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    @property
    def callback_url(self) -> str:
        """OAuth redirect URI this service receives authorization codes on."""
        if self.oauth_redirect_url:
            return self.oauth_redirect_url
        return f"{self.client_url}:{self.port}{OAUTH2_CALLBACK_PATH}"

    def get_log_file(self, component_name: str = "oauth_retry") -> Path:
        """Get a log file path for a specific component.

        Creates log files with the format: {component_name}_{date}.log

        Args:
            component_name: Name of the component

        Returns:
            Path to the log file
        """
        date_str = datetime.now().strftime("%Y-%m-%d")
        safe_name = "".join(c if c.isalnum() or c in "_-" else "_" for c in component_name)
        return self.log_dir / f"{safe_name}_{date_str}.log"
