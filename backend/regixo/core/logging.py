import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List

from regixo.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers kept at WARNING so request logs stay readable
QUIET_LOGGERS = ("uvicorn", "sqlalchemy")


def _handlers() -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if not settings.LOG_FILE:
        return handlers
    try:
        handlers.append(RotatingFileHandler(settings.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5))
    except OSError as e:
        # Read-only filesystems still get stdout
        sys.stderr.write(f"Log file {settings.LOG_FILE} unavailable: {e}\n")
    return handlers


def setup_logging():
    """Route regixo logs to stdout and, when LOG_FILE is set, a rotating file."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in _handlers():
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
