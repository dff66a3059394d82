"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from datetime import timedelta

from flask import Flask

from taskmanager.core.config import BaseConfig, get_config
from taskmanager.core.logger import configure_logging, init_app as init_logging
from taskmanager.services._shared.ports.refresh_token_store import RefreshTokenStore


def _build_refresh_store(app: Flask) -> RefreshTokenStore:
    """Select the refresh token backend from ``REFRESH_TOKEN_BACKEND``."""
    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sql")).strip().lower()
    if backend == "redis":
        from taskmanager.core.extensions import get_redis
        from taskmanager.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(get_redis())
    if backend == "sql":
        from taskmanager.infra.sqlalchemy.sqlalchemy_refresh_token_store import (
            SQLAlchemyRefreshTokenStore,
        )

        return SQLAlchemyRefreshTokenStore()
    raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND {backend!r}; expected 'sql' or 'redis'.")


def init_services(app: Flask) -> None:
    """Build the application services once and park them in ``app.extensions``.

    Services are stateless apart from their collaborators, so one instance per
    app is shared by every request.
    """
    from taskmanager.infra.email.logging_email_sender import LoggingEmailSender
    from taskmanager.services.auth.dto import AuthTokenConfig
    from taskmanager.services.auth.service import SessionService
    from taskmanager.services.auth.sweep import TokenSweeper
    from taskmanager.services.registration.service import RegistrationService
    from taskmanager.services.tasks.service import TaskService
    from taskmanager.services.teams.service import TeamService
    from taskmanager.services.users.service import UserService

    refresh_store = _build_refresh_store(app)
    app.extensions["refresh_token_store"] = refresh_store

    app.extensions["session_service"] = SessionService(
        token_codec=app.extensions["token_codec"],
        refresh_store=refresh_store,
        token_cfg=AuthTokenConfig.from_mapping(app.config),
    )
    app.extensions["registration_service"] = RegistrationService(
        email_sender=app.extensions.get("email_sender") or LoggingEmailSender(),
        token_ttl=timedelta(minutes=int(app.config.get("VERIFICATION_TOKEN_TTL_MINUTES", 1440))),
        public_base_url=str(app.config.get("PUBLIC_BASE_URL", "http://localhost:8000")),
    )
    app.extensions["team_service"] = TeamService()
    app.extensions["task_service"] = TaskService()
    app.extensions["user_service"] = UserService(refresh_store=refresh_store)

    sweeper = TokenSweeper(
        refresh_store=refresh_store,
        interval_seconds=int(app.config.get("TOKEN_SWEEP_INTERVAL_SECONDS", 0)),
        app=app,
    )
    app.extensions["token_sweeper"] = sweeper
    if sweeper.interval_seconds > 0 and not app.config.get("TESTING"):
        sweeper.start()


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from taskmanager.core import extensions

    extensions.init_app(app)

    init_logging(app)

    # Proxy headers and CORS
    from taskmanager.core import middleware

    middleware.init_app(app)

    init_services(app)

    from taskmanager.api import init_app as init_api

    init_api(app)

    from taskmanager.core import errors

    errors.init_app(app)

    from taskmanager import cli as app_cli

    app_cli.init_app(app)

    return app
