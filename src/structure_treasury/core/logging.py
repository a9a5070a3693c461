"""Logging setup shared by the API and the CLI."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once.

    Args:
        level: Log level name
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQLAlchemy engine logging is controlled by the echo flag
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
