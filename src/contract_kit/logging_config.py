"""Logging configuration for contract-kit.

Library modules only create module-level loggers; handlers are installed
here, by applications (the CLI calls :func:`setup_logging`).
"""

import logging
import sys

PACKAGE_LOGGER = "contract_kit"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggingConfig:
    """Installs a single stream handler on the package logger."""

    def __init__(self):
        self._handler: logging.Handler | None = None

    def setup_logging(self, debug: bool = False) -> None:
        """Configure package logging.

        Calling this more than once replaces the previous handler instead of
        stacking a second one.

        Args:
            debug: Whether to enable debug logging
        """
        logger = logging.getLogger(PACKAGE_LOGGER)

        if self._handler is not None:
            logger.removeHandler(self._handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if debug else logging.WARNING)
        self._handler = handler

    def stop(self) -> None:
        """Remove the installed handler."""
        if self._handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(self._handler)
            self._handler = None


logging_config = LoggingConfig()


def setup_logging(debug: bool = False) -> None:
    """Set up package logging.

    Args:
        debug: Whether to enable debug logging
    """
    logging_config.setup_logging(debug)


def stop_logging() -> None:
    """Remove the package log handler."""
    logging_config.stop()


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)
