import logging
import sys

from gasrefill.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the package logger."""
    root = logging.getLogger("gasrefill")
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if not any(getattr(h, "_gasrefill", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._gasrefill = True
        root.addHandler(handler)
