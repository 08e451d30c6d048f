"""Helpers for getting configuration and globals from the Flask context."""

import os
from typing import Optional, Mapping, Any

from flask import current_app, g, has_app_context

from . import config


def get_application_config(app: Optional[Any] = None) -> Mapping:
    """
    Get a configuration from the current app, or fall back to env.

    Parameters
    ----------
    app : :class:`flask.Flask`

    Returns
    -------
    dict-like
        This is either the current Flask application configuration, or
        ``os.environ``. Either of these should support the ``get()`` method.

    """
    if app is not None:
        return app.config
    if has_app_context():
        return current_app.config
    return os.environ


def get_application_global() -> Optional[Any]:
    """
    Get the current application global proxy object.

    Returns
    -------
    proxy or None

    """
    if has_app_context():
        return g
    return None


def get_setting(key: str, app: Optional[Any] = None) -> Any:
    """Get a setting from the app config, falling back to :mod:`.config`."""
    default = getattr(config, key, None)
    if app is None and not has_app_context():
        return default
    return get_application_config(app).get(key, default)
