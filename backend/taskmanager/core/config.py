"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Minimum HMAC key length accepted outside testing (bytes of the UTF-8 secret)
MIN_JWT_SECRET_LENGTH: Final[int] = 32

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        HMAC key used to sign access and refresh tokens (HS256). Loaded once
        by :func:`taskmanager.core.extensions.init_app` and never logged.
    JWT_ACCESS_TOKEN_EXPIRES_SECONDS: int
        Access token lifetime (15 minutes by default).
    JWT_REFRESH_TOKEN_EXPIRES_SECONDS: int
        Refresh token lifetime (14 days by default).
    AUTH_REVOKE_CHAIN_ON_REUSE: bool
        When ``True`` a replayed, already-rotated refresh token deletes every
        refresh session of its subject.
    REFRESH_TOKEN_BACKEND: str
        ``"sql"`` (default) or ``"redis"``.
    REDIS_URL: str | None
        Connection URL for the Redis refresh-token backend.
    VERIFICATION_TOKEN_TTL_MINUTES: int
        Lifetime of account verification tokens.
    PUBLIC_BASE_URL: str
        Base URL used to build verification links.
    TOKEN_SWEEP_INTERVAL_SECONDS: int
        Period of the background token sweep; ``0`` disables it.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES_SECONDS = env_int("JWT_ACCESS_TOKEN_EXPIRES_SECONDS", 15 * 60)
    JWT_REFRESH_TOKEN_EXPIRES_SECONDS = env_int(
        "JWT_REFRESH_TOKEN_EXPIRES_SECONDS", 14 * 24 * 60 * 60
    )
    AUTH_REVOKE_CHAIN_ON_REUSE = env_bool("AUTH_REVOKE_CHAIN_ON_REUSE", False)

    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sql")
    REDIS_URL = os.getenv("REDIS_URL")

    VERIFICATION_TOKEN_TTL_MINUTES = env_int("VERIFICATION_TOKEN_TTL_MINUTES", 24 * 60)
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    TOKEN_SWEEP_INTERVAL_SECONDS = env_int("TOKEN_SWEEP_INTERVAL_SECONDS", 0)

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a fixed signing key so tokens are reproducible across fixtures.
    - Never starts the background sweep.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-secret-key-with-at-least-32-bytes"
    REFRESH_TOKEN_BACKEND = "sql"
    TOKEN_SWEEP_INTERVAL_SECONDS = 0
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
