"""WSGI/HTTP middleware: reverse-proxy headers and CORS for the SPA client."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from bandsync.core.logger import REQUEST_ID_HEADER


def init_app(app: Flask) -> None:
    """Apply ``ProxyFix`` (when ``USE_PROXYFIX``) and the CORS policy.

    ``CORS_ORIGINS`` is a comma-separated allow-list; blank or ``"*"`` allows
    any origin without credentials. Only ``/api/*`` routes are covered. The
    request id header is exposed so the browser client can report it.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore[method-assign]

    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    wildcard = not origins or origins == ["*"]
    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
