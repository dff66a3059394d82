"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from taskmanager.core.logger import ensure_request_id
from taskmanager.services.auth.service import SessionService
from taskmanager.services.registration.service import RegistrationService
from taskmanager.services.tasks.service import TaskService
from taskmanager.services.teams.service import TeamService
from taskmanager.services.users.service import UserService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def _service(name: str) -> Any:
    try:
        return current_app.extensions[name]
    except KeyError as exc:  # pragma: no cover - wiring error
        raise RuntimeError(f"Service {name!r} is not configured; call create_app().") from exc


def session_service() -> SessionService:
    return cast(SessionService, _service("session_service"))


def registration_service() -> RegistrationService:
    return cast(RegistrationService, _service("registration_service"))


def team_service() -> TeamService:
    return cast(TeamService, _service("team_service"))


def task_service() -> TaskService:
    return cast(TaskService, _service("task_service"))


def user_service() -> UserService:
    return cast(UserService, _service("user_service"))


def bearer_token() -> str:
    """Return the raw token of an ``Authorization: Bearer`` header, or ``""``."""
    header = request.headers.get("Authorization", "")
    if header[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return ""
    return header[len(BEARER_PREFIX) :].strip()


def require_auth(func: F) -> F:
    """Authenticate the bearer access token and pass ``ctx`` to the view.

    The view receives the :class:`~taskmanager.services._shared.context.AuthContext`
    as a keyword argument; identity is never read from globals further down.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        ctx = session_service().authenticate(bearer_token(), request_id=ensure_request_id())
        return func(*args, ctx=ctx, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_body() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    return Response(status=204)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
