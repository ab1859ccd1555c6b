"""Logging configuration."""
import logging
import sys
from typing import Optional

from concierge.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty at INFO; only their warnings are useful here
QUIET_LOGGERS = ("httpx", "sqlalchemy.engine", "aiosqlite", "uvicorn.access")


def resolve_log_level(name: Optional[str]) -> int:
    """Map a level name like "debug" to its logging constant, defaulting to INFO."""
    if not name:
        return logging.INFO
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging to stdout; ``level`` overrides settings.log_level."""
    logging.basicConfig(
        level=resolve_log_level(level or settings.log_level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"[LOGGING] Configured - level: {logging.getLevelName(logging.getLogger().level)}")
