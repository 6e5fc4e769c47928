"""
System Reporter - Centralized logging with verbosity filtering.

Provides SystemReporter for console/file logging. Console output goes to
stdout so container runtimes collect it; a daily-rotated file is added
when a log directory is configured.
"""

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, Union

# Constants
LOG_RETENTION_DAYS = 1
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SystemReporter:
    """
    Logger with verbose filtering and "[context]" message prefixes.

    Verbose Levels:
        0 = Critical only (always visible)
        1 = Important messages (default)
        2 = Detailed information
        3 = Debug/verbose
    """

    def __init__(
        self,
        name: str = "system",
        log_dir: Optional[str] = None,
        level: Union[int, str] = logging.INFO,
        verbose: int = 1,
    ) -> None:
        """
        Initialize SystemReporter.

        Args:
            name: Logger name (used for filename if log_dir provided)
            log_dir: Directory for log files. If None, logs to stdout only.
                    Relative paths are resolved from the working directory.
            level: Python logging level or level name ("info", "debug", ...)
            verbose: Verbosity filter (0-3)
        """
        self.name = name
        self.verbose = max(0, min(3, verbose))
        self.log_file: Optional[str] = None

        self._init_logger(name, log_dir, self._resolve_level(level))

    @staticmethod
    def _resolve_level(level: Union[int, str]) -> int:
        """Translate a level name into a logging level number."""
        if isinstance(level, int):
            return level

        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved

    def _init_logger(self, name: str, log_dir: Optional[str], level: int) -> None:
        """
        Initialize logger with console and optional file handlers.

        Args:
            name: Logger name
            log_dir: Log directory path (None = stdout only)
            level: Python logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        # Always add console handler (stdout)
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_dir:
            log_dir = os.path.abspath(log_dir)
            os.makedirs(log_dir, exist_ok=True)
            self.log_file = os.path.join(log_dir, f"{name}.log")

            file_handler = TimedRotatingFileHandler(
                self.log_file,
                when="D",
                backupCount=LOG_RETENTION_DAYS,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def set_verbose(self, level: int) -> None:
        """Update verbosity level."""
        self.verbose = max(0, min(3, level))
        self.info(
            f"Verbosity set to {self.verbose}",
            context="SystemReporter",
            verbose_level=0,
        )

    def _should_log(self, verbose_level: int) -> bool:
        """Check if message should be logged."""
        return self.verbose >= verbose_level

    # Core logging methods
    def debug(self, msg: str, context: str = "system", verbose_level: int = 3) -> None:
        """Log debug message."""
        if self._should_log(verbose_level):
            self.logger.debug(f"[{context}] {msg}")

    def info(self, msg: str, context: str = "system", verbose_level: int = 1) -> None:
        """Log info message."""
        if self._should_log(verbose_level):
            self.logger.info(f"[{context}] {msg}")

    def warning(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        """Log warning message."""
        if self._should_log(verbose_level):
            self.logger.warning(f"[{context}] {msg}")

    def error(
        self,
        msg: str,
        context: str = "system",
        verbose_level: int = 0,
        exc_info: bool = False,
    ) -> None:
        """Log error message, optionally with the active traceback."""
        if self._should_log(verbose_level):
            self.logger.error(f"[{context}] {msg}", exc_info=exc_info)

    def critical(
        self, msg: str, context: str = "system", verbose_level: int = 0
    ) -> None:
        """Log critical message."""
        if self._should_log(verbose_level):
            self.logger.critical(f"[{context}] {msg}")

    def close(self) -> None:
        """Flush and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
