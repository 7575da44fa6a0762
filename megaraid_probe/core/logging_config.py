"""Centralized logging configuration for the probe.

The library modules only create loggers; handlers are installed here, once,
by whichever entry point runs the probe.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LoggingConfigurator:
    """Handles all logging setup independently of other configuration."""

    @staticmethod
    def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None) -> None:
        """Set up logging configuration. Use DEBUG to see storcli invocations and decode summaries.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional path to log file. If None, logs to console only.
        """
        level = getattr(logging, log_level.upper(), None)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level}")

        handlers = [logging.StreamHandler()]
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.insert(0, logging.FileHandler(log_file))

        logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        """Get a logger instance.

        Args:
            name: Logger name (usually __name__)

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)
