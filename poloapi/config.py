"""Configuration management for the Poloniex client."""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exchange.client import DEFAULT_USER_AGENT, PUBLIC_URL, TRADING_URL


# Load .env from project root (when developing) or cwd (when installed)
def _load_env_files() -> None:
    cwd = Path.cwd()
    project_root = Path(__file__).resolve().parent.parent
    for base in (cwd, project_root):
        env_default = base / ".env.default"
        env_file = base / ".env"
        if env_default.exists():
            load_dotenv(env_default)
        if env_file.exists():
            load_dotenv(env_file)
            break


_load_env_files()


class Config(BaseSettings):
    """Client configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_case=True,
    )

    # Credentials
    poloniex_api_key: str = Field(default="")
    poloniex_api_secret: str = Field(default="")

    # Endpoints
    poloniex_public_url: str = Field(default=PUBLIC_URL)
    poloniex_trading_url: str = Field(default=TRADING_URL)

    # Transport
    request_timeout: float = Field(default=10.0, gt=0)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    log_level: str = Field(default="INFO")

    def validate(self, require_credentials: bool = True) -> list[str]:
        """Validate configuration and return list of error messages."""
        errors = []
        if require_credentials:
            if not self.poloniex_api_key:
                errors.append("POLONIEX_API_KEY is required for trading commands")
            if not self.poloniex_api_secret:
                errors.append("POLONIEX_API_SECRET is required for trading commands")
        for name in ("poloniex_public_url", "poloniex_trading_url"):
            if not getattr(self, name).startswith("https://"):
                errors.append(f"{name.upper()} must be an https:// URL")
        return errors
