"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, jsonify, request
from flask_jwt_extended import JWTManager, verify_jwt_in_request

from bandsync.core.errors import Unauthorized, problem_response
from bandsync.services.auth import SessionManager

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_TOKEN_REQUIRED = "Access token required"
ACCESS_TOKEN_INVALID = "Invalid or expired access token"


def get_session_manager() -> SessionManager:
    """Return the :class:`SessionManager` wired by the app factory."""

    return cast(SessionManager, current_app.extensions["session_manager"])


def json_body() -> dict[str, Any]:
    """Return the JSON request body, or an empty dict when absent or not JSON."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def init_jwt_loaders(jwt: JWTManager) -> None:
    """Make bearer failures 401 problems instead of the library defaults.

    Invalid, expired and wrong-purpose tokens share one message.
    """

    def _unauthorized(message: str) -> Response:
        return problem_response(Unauthorized(message).to_problem())

    @jwt.unauthorized_loader
    def _missing(reason: str) -> Response:
        return _unauthorized(ACCESS_TOKEN_REQUIRED)

    @jwt.invalid_token_loader
    def _invalid(reason: str) -> Response:
        return _unauthorized(ACCESS_TOKEN_INVALID)

    @jwt.expired_token_loader
    def _expired(jwt_header: dict, jwt_payload: dict) -> Response:
        return _unauthorized(ACCESS_TOKEN_INVALID)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


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


def attach_session_manager(app: Flask, manager: SessionManager) -> None:
    """Expose ``manager`` to request handlers through ``app.extensions``."""

    app.extensions["session_manager"] = manager
