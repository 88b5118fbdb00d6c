"""Server configuration via pydantic-settings."""

import os
from pathlib import Path
from typing import Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_server.errors import ConfigurationError

# Directory that holds the package (portfolio_server/) and the built bundle (dist/)
_PROJECT_DIR = Path(__file__).resolve().parent.parent

ENTRY_DOCUMENT = "index.html"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_DIR / ".env"),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # Listener
    PORT: int = 3000
    HOST: str = "0.0.0.0"

    # Prebuilt bundle – Vite writes it next to the server package
    ASSET_ROOT: Path = _PROJECT_DIR / "dist"

    # Logging
    ACCESS_LOG: bool = True
    LOG_LEVEL: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"

    # Hardening
    KEEP_ALIVE_TIMEOUT: int = 5
    SHUTDOWN_TIMEOUT: int = 10

    @field_validator("PORT")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value <= 65535:
            raise ValueError("must be an integer between 1 and 65535")
        return value

    @field_validator("ASSET_ROOT")
    @classmethod
    def _absolute_asset_root(cls, value: Path) -> Path:
        """Resolve relative asset roots against the project directory."""
        if not os.path.isabs(value):
            value = _PROJECT_DIR / value
        return value.resolve()

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _lower_log_level(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("KEEP_ALIVE_TIMEOUT", "SHUTDOWN_TIMEOUT")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @property
    def entry_document(self) -> Path:
        return self.ASSET_ROOT / ENTRY_DOCUMENT


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, raising ConfigurationError on bad values."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc
