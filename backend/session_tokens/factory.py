"""Application factory."""

from __future__ import annotations

from flask import Flask

from session_tokens.core.config import BaseConfig, get_config
from session_tokens.core.logger import configure_logging


def create_app(
    config: type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
) -> Flask:
    """Build the session-token service.

    Parameters
    ----------
    config:
        Configuration object; defaults to the class selected by ``APP_ENV``.
    instance_relative_config:
        Also read ``instance/config.py`` when present.

    Raises
    ------
    session_tokens.core.keys.SigningKeyUnavailableError
        When signing keys are missing or malformed. No app is returned.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(config if config is not None else get_config())
    if instance_relative_config:
        app.config.from_pyfile("config.py", silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Imported here so configuration is in place before extensions bind
    from session_tokens import cli
    from session_tokens.api import init_app as register_api
    from session_tokens.core import cors, errors, extensions, logger, proxy

    proxy.init_app(app)
    extensions.init_app(app)  # loads key material first
    logger.init_app(app)
    cors.init_app(app)
    register_api(app)
    errors.init_app(app)
    cli.init_app(app)

    return app
