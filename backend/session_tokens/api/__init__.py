"""HTTP delivery layer."""

from __future__ import annotations

from flask import Flask


def _join(*parts: str) -> str:
    return "/" + "/".join(p.strip("/") for p in parts if p.strip("/"))


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint under ``<API_BASE_PREFIX>/v1``.

    A blueprint registered with an empty prefix sits at the version root,
    e.g. ``/api/v1/health``.
    """
    from session_tokens.api.v1 import API_VERSION, REGISTRY

    root = _join(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    for blueprint, prefix in REGISTRY:
        app.register_blueprint(blueprint, url_prefix=_join(root, prefix))


__all__ = ["init_app"]
