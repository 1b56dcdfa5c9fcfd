"""Main application settings and configuration management.

This module composes the settings from the different modules (app, database,
auth, email) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, SMTP credentials not required, ephemeral JWT secret if unset
- Test: Uses .env.test, email test mode enabled
- Staging: Uses .env.staging, JWT secret and SMTP credentials required
- Production: Uses .env.production, JWT secret and SMTP credentials required
"""

import logging
import os
import secrets
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .email import EmailSettings

logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)

_RELAXED_ENVIRONMENTS = ("development", "test")
_MIN_JWT_SECRET_LENGTH = 32


class Settings(AppSettings, DatabaseSettings, AuthSettings, EmailSettings):
    """The main settings class that aggregates all application configurations.

    Environment Support:
        - Automatically loads the correct .env file based on APP_ENV
        - Development/Test: email test mode enabled, secrets optional
        - Staging/Production: secrets required

    Security Note:
        - JWT_SECRET and SMTP credentials are SecretStr and never logged.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific configuration."""
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env in _RELAXED_ENVIRONMENTS:
            self.EMAIL_TEST_MODE = True
            logger.info(f"Email test mode enabled for {env} environment")

            if not self.JWT_SECRET.get_secret_value():
                # Sessions signed with it do not survive a restart.
                self.JWT_SECRET = SecretStr(secrets.token_urlsafe(48))
                logger.warning(f"JWT_SECRET not set; generated an ephemeral secret for {env}")

        if env == "development":
            self.DEBUG = True

        logger.info(f"Application running in {env} environment")

    def validate_required_fields(self) -> None:
        """Validates that critical settings are present.

        Outside development and test a missing or short JWT_SECRET, or an
        invalid SMTP configuration, is fatal.

        Raises:
            ValueError: If required settings are missing in a strict environment.
        """
        relaxed = self.APP_ENV in _RELAXED_ENVIRONMENTS
        secret = self.JWT_SECRET.get_secret_value()
        if len(secret) < _MIN_JWT_SECRET_LENGTH:
            error_msg = f"JWT_SECRET must be at least {_MIN_JWT_SECRET_LENGTH} characters"
            if relaxed:
                logger.warning(f"{self.APP_ENV} mode: {error_msg}")
            else:
                logger.error(error_msg)
                raise ValueError(error_msg)

        try:
            self.validate_smtp_config()
        except ValueError as e:
            if relaxed:
                logger.warning(f"{self.APP_ENV} mode: Email config warning - {e}")
            else:
                logger.error(f"Email configuration error: {e}")
                raise


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    else:
        logger.info(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


settings = create_settings()
settings.validate_required_fields()
