"""
Logging Setup

Configures the standard library root logger once at startup.
"""

import logging

from academy.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging for the application.

    Args:
        level: Optional level name override; defaults to settings.LOG_LEVEL.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )
    # SQL statement logging stays off unless explicitly enabled
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
