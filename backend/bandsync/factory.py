"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from bandsync.core.config import BaseConfig, get_config, load_auth_settings
from bandsync.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises ConfigurationError: When the token signing secret is missing or a
        setting is invalid; nothing is wired in that case.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    settings = load_auth_settings(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from bandsync.core import middleware

    middleware.init_app(app)

    from bandsync.core import extensions

    extensions.init_app(app, settings)

    init_logging(app)

    from bandsync.api import init_app as init_api

    init_api(app)

    from bandsync.core import errors

    errors.init_app(app)

    from bandsync import cli as app_cli

    app_cli.init_app(app)

    from bandsync.api.deps import attach_session_manager
    from bandsync.infra import build_ledger
    from bandsync.infra.jwt.jwt_token_codec import JWTTokenCodec
    from bandsync.services.auth import SessionManager

    attach_session_manager(
        app,
        SessionManager(
            settings=settings,
            codec=JWTTokenCodec(settings),
            ledger=build_ledger(app),
        ),
    )

    return app
