"""Application settings loaded from environment / .env file.

Config precedence (highest to lowest):
    1. Environment variables
    2. ``.env`` file in project root
    3. Defaults defined in this module

The master API token is never exposed in ``repr()``, ``str()``, or logs.
"""

from pathlib import Path

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root is three levels up from this file (backend/app/core/settings.py)
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_DEFAULT_DB_PATH = str(_PROJECT_ROOT / "data" / "forum.db")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
    )

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v2/posts"

    # Database — override via APP_DB_PATH env var
    app_db_path: str = _DEFAULT_DB_PATH

    @property
    def database_url(self) -> str:
        """SQLite connection URL derived from ``app_db_path``."""
        return f"sqlite:///{self.app_db_path}"

    # Master token lets a trusted caller act as any uid via ``_uid``
    master_token: SecretStr | None = None

    # Posting rules
    minimum_post_length: int = 8
    maximum_post_length: int = 32767
    minimum_title_length: int = 3
    maximum_title_length: int = 255
    maximum_tags_per_topic: int = 5
    post_edit_duration: int = 0  # seconds, 0 = unlimited

    # Voting
    voting_enabled: bool = True
    downvoting_enabled: bool = True

    @model_validator(mode="after")
    def _validate_db_path(self) -> "Settings":
        """Ensure the DB path parent directory exists or can be created."""
        parent = Path(self.app_db_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = (
                f"Cannot create database directory '{parent}': {exc}. "
                f"Set APP_DB_PATH to a writable location."
            )
            raise ValueError(msg) from exc
        return self

    @model_validator(mode="after")
    def _validate_post_lengths(self) -> "Settings":
        if self.minimum_post_length > self.maximum_post_length:
            raise ValueError(
                "minimum_post_length must not exceed maximum_post_length"
            )
        if self.minimum_title_length > self.maximum_title_length:
            raise ValueError(
                "minimum_title_length must not exceed maximum_title_length"
            )
        return self

    @property
    def is_master_token_configured(self) -> bool:
        return self.master_token is not None and bool(
            self.master_token.get_secret_value()
        )

    def safe_dump(self) -> dict[str, object]:
        """Return settings dict with secrets masked — safe for logging."""
        return {
            "api_host": self.api_host,
            "api_port": self.api_port,
            "debug": self.debug,
            "log_level": self.log_level,
            "api_prefix": self.api_prefix,
            "app_db_path": self.app_db_path,
            "is_master_token_configured": self.is_master_token_configured,
            "post_edit_duration": self.post_edit_duration,
            "voting_enabled": self.voting_enabled,
            "downvoting_enabled": self.downvoting_enabled,
        }


settings = Settings()
