"""Root logging for the API process and the maintenance scripts."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Provider calls are logged by upstream_gateway; the client libraries only add noise
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def resolve_level(level: int | str | None) -> int:
    """Numeric level for `level`, reading LOG_LEVEL from settings when it is None."""
    if level is None:
        try:
            from city_explorer.config import settings
            level = settings.log_level
        except Exception:
            return logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str | None = None) -> None:
    """Send every record to stdout at `level`, replacing handlers from earlier calls."""
    root = logging.getLogger()
    root.setLevel(resolve_level(level))
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
