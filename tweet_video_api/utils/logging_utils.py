import logging
import logging.config
from collections import deque
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Deque, List

import yaml

from ..config.settings import settings

DEFAULT_LOGGING_CONFIG_PATH = Path(settings.LOGGING_CONFIG_PATH)
PACKAGE_LOGGER_NAME = "tweet_video_api"


def setup_logging(config_path: Path = DEFAULT_LOGGING_CONFIG_PATH) -> None:
    """
    Set up logging configuration from a YAML file.

    Args:
        config_path (Path): Path to the logging configuration YAML file.
    """
    if config_path.exists():
        try:
            with open(config_path, 'rt') as f:
                log_config = yaml.safe_load(f.read())
            logging.config.dictConfig(log_config)
            logging.info(f"Logging configured successfully from {config_path}")
        except Exception as e:
            logging.basicConfig(level=logging.INFO)  # Basic config as fallback
            logging.error(f"Error loading logging configuration from {config_path}: {e}. Using basicConfig.")
    else:
        logging.basicConfig(level=logging.INFO)  # Basic config if no file found
        logging.warning(f"Logging configuration file not found at {config_path}. Using basicConfig.")

    # dictConfig replaces handlers on configured loggers, so re-attach the buffer.
    attach_recent_log_handler()


class RecentLogHandler(logging.Handler):
    """
    Logging handler that keeps the most recent formatted lines in memory.

    Backs the admin "logs" view. Lines are stored oldest-first and returned
    newest-first.
    """

    def __init__(self, capacity: int = 500, level: int = logging.INFO):
        super().__init__(level=level)
        self._lines: Deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
            self._lines.append(f"[{created}] {record.levelname} {record.name}: {record.getMessage()}")
        except Exception:
            self.handleError(record)

    def recent(self, limit: int) -> List[str]:
        """Return up to ``limit`` lines, newest first."""
        if limit <= 0:
            return []
        lines = list(self._lines)
        lines.reverse()
        return lines[:limit]

    def clear(self) -> None:
        self._lines.clear()


@lru_cache
def get_recent_log_handler() -> RecentLogHandler:
    """Returns the process-wide recent-lines handler."""
    return RecentLogHandler()


def attach_recent_log_handler() -> RecentLogHandler:
    """Attach the recent-lines handler to the package logger if it is not already there."""
    handler = get_recent_log_handler()
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if handler not in package_logger.handlers:
        package_logger.addHandler(handler)
    if package_logger.level == logging.NOTSET:
        package_logger.setLevel(logging.INFO)
    return handler
