# backend/chatline/core/config.py
import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


DEFAULT_PROFILE_PICTURE_KEYS: List[str] = [
    "avatar-fox",
    "avatar-owl",
    "avatar-otter",
    "avatar-panda",
    "avatar-koala",
    "avatar-tiger",
    "avatar-whale",
    "avatar-heron",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: str = Field(default="development", description="Deployment environment name")

    # Database
    database_url: str = Field(
        default="sqlite:///./chatline.db",
        description="SQLAlchemy database URL",
    )
    sql_echo: bool = False
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables during application startup",
    )

    # Tokens
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-me"),
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Credentials
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    password_min_length: int = 5
    username_max_length: int = 50

    # Messaging
    message_max_length: int = 5000
    profile_picture_keys: List[str] = Field(default_factory=lambda: list(DEFAULT_PROFILE_PICTURE_KEYS))

    # HTTP
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Observability
    log_level: str = "INFO"
    slow_operation_threshold_seconds: float = 1.0

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("profile_picture_keys")
    @classmethod
    def _require_profile_pictures(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("At least one profile picture key is required")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()

if settings.is_production and settings.secret_key.get_secret_value() == "dev-secret-key-change-me":
    logger.warning("[CONFIG] Running in production with the default SECRET_KEY")
