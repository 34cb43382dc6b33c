"""
Logging Infrastructure Module

Provides:
- File logging with daily rotation
- JSON structured output
- Subsystem loggers (auth, store, api)
"""
import os
import sys
import json
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timezone
from typing import Optional
from functools import lru_cache

# Default configuration
DEFAULT_LOG_DIR = "./logs"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_DAYS = 15
DEFAULT_JSON_FORMAT = True
LOG_FILE_NAME = "tracker.log"
ROOT_LOGGER_NAME = "hstl_tracker"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "subsystem": getattr(record, 'subsystem', record.name),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


class ConsoleFormatter(logging.Formatter):
    """Plain console output with subsystem prefixes."""

    def format(self, record: logging.LogRecord) -> str:
        subsystem = getattr(record, 'subsystem', record.name)
        if subsystem.startswith(f"{ROOT_LOGGER_NAME}."):
            subsystem = subsystem[len(ROOT_LOGGER_NAME) + 1:]

        timestamp = datetime.now().strftime('%H:%M:%S')
        line = f"{timestamp} {record.levelname:<7} [{subsystem}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class SubsystemLogger(logging.LoggerAdapter):
    """Logger adapter that adds subsystem context."""

    def __init__(self, logger: logging.Logger, subsystem: str):
        super().__init__(logger, {'subsystem': subsystem})
        self.subsystem = subsystem

    def process(self, msg, kwargs):
        kwargs.setdefault('extra', {})
        kwargs['extra']['subsystem'] = self.subsystem
        return msg, kwargs

    def child(self, name: str) -> "SubsystemLogger":
        """Create a child logger with extended subsystem path."""
        return SubsystemLogger(self.logger, f"{self.subsystem}/{name}")


class LoggingManager:
    """Centralized logging configuration manager."""

    _instance: Optional["LoggingManager"] = None
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if LoggingManager._initialized:
            return

        self.log_dir = DEFAULT_LOG_DIR
        self.log_level = DEFAULT_LOG_LEVEL
        self.max_days = DEFAULT_MAX_DAYS
        self.json_format = DEFAULT_JSON_FORMAT
        self.root_logger: logging.Logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._file_handler: Optional[TimedRotatingFileHandler] = None
        self._console_handler: Optional[logging.StreamHandler] = None

    def configure(
        self,
        log_dir: Optional[str] = None,
        log_level: Optional[str] = None,
        max_days: Optional[int] = None,
        json_format: Optional[bool] = None,
        console: bool = True,
    ):
        """Configure the logging system."""
        if log_dir:
            self.log_dir = log_dir
        if log_level:
            self.log_level = log_level.upper()
        if max_days is not None:
            self.max_days = max_days
        if json_format is not None:
            self.json_format = json_format

        self._setup_logging(console)
        LoggingManager._initialized = True

    def _setup_logging(self, console: bool = True):
        """Set up logging handlers."""
        os.makedirs(self.log_dir, exist_ok=True)

        self.root_logger.setLevel(getattr(logging, self.log_level, logging.INFO))

        for handler in list(self.root_logger.handlers):
            self.root_logger.removeHandler(handler)
            handler.close()

        # File handler with daily rotation
        self._file_handler = TimedRotatingFileHandler(
            filename=self.get_log_file_path(),
            when="midnight",
            interval=1,
            backupCount=self.max_days,
            encoding="utf-8"
        )
        self._file_handler.suffix = "%Y-%m-%d"

        if self.json_format:
            self._file_handler.setFormatter(JSONFormatter())
        else:
            self._file_handler.setFormatter(
                logging.Formatter('%(asctime)s [%(name)s] %(levelname)s: %(message)s')
            )
        self.root_logger.addHandler(self._file_handler)

        if console:
            self._console_handler = logging.StreamHandler(sys.stdout)
            self._console_handler.setFormatter(ConsoleFormatter())
            self.root_logger.addHandler(self._console_handler)

        # Prevent propagation to root logger
        self.root_logger.propagate = False

    def get_log_file_path(self) -> str:
        """Get the current log file path."""
        return os.path.join(self.log_dir, LOG_FILE_NAME)

    def get_subsystem_logger(self, subsystem: str) -> SubsystemLogger:
        """Get a logger for a specific subsystem."""
        return SubsystemLogger(self.root_logger, subsystem)


# Singleton instance
_manager = LoggingManager()


def configure_logging(
    log_dir: Optional[str] = None,
    log_level: Optional[str] = None,
    max_days: Optional[int] = None,
    json_format: Optional[bool] = None,
    console: bool = True,
):
    """Configure the logging system. Call once at startup."""
    _manager.configure(
        log_dir=log_dir,
        log_level=log_level,
        max_days=max_days,
        json_format=json_format,
        console=console,
    )


def get_logger(subsystem: str) -> SubsystemLogger:
    """
    Get a subsystem logger.

    Usage:
        log = get_logger("store")
        log.info("Store initialized")

        child = log.child("insert")
        child.debug("Inserting record")
    """
    return _manager.get_subsystem_logger(subsystem)


def get_log_file_path() -> str:
    """Get the current log file path."""
    return _manager.get_log_file_path()


@lru_cache(maxsize=32)
def _cached_logger(subsystem: str) -> SubsystemLogger:
    return get_logger(subsystem)


def auth_logger() -> SubsystemLogger:
    return _cached_logger("auth")


def store_logger() -> SubsystemLogger:
    return _cached_logger("store")


def api_logger() -> SubsystemLogger:
    return _cached_logger("api")
