"""Logging bootstrap for host applications that have not configured logging."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Apply a basic root configuration; a no-op if handlers already exist."""
    if level is None:
        from config.settings import settings

        level = settings.log_level

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("harvest_forecast").setLevel(level.upper())
