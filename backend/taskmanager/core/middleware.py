"""WSGI-level middleware wiring: upstream proxy headers and CORS."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix


def _allowed_origins(raw: str) -> list[str] | str:
    """Split ``CORS_ORIGINS``; blank or ``*`` means any origin."""
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    """Apply :class:`ProxyFix` (unless ``USE_PROXYFIX`` is false) and CORS.

    Credentials are only allowed for an explicit origin list, since the
    ``Authorization`` header carries bearer tokens.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    origins = _allowed_origins(str(app.config.get("CORS_ORIGINS", "")))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=origins != "*",
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
