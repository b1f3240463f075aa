"""Logging configuration for applications embedding servicecall.

Library modules only create loggers; this helper is for the entry point and
for applications that want the same format.
"""

import logging

from servicecall.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging with the level from settings.

    Args:
        settings: Settings providing ``log_level``. Defaults to get_settings().
    """
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)
    logging.getLogger("servicecall").setLevel(settings.log_level)
