"""
Logging setup for the Vegobolt backend.

Console output is written inline. The rotating log files (app, auth and
devices) sit behind a QueueHandler whose QueueListener thread does the disk
writes, so MQTT callbacks and request handlers never wait on file I/O.
Every record carries the request correlation id.
"""

import atexit
import logging
import logging.handlers
import queue
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from core.middleware.correlation import CorrelationIdFilter


# Running listener, stopped on shutdown or at exit
_queue_listener: Optional[logging.handlers.QueueListener] = None


class LogConfig(BaseModel):
    """Resolved logging options, built from LoggingSettings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_file_logging: bool = True
    log_dir: str = "logs"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_console: bool = True


class ColoredFormatter(logging.Formatter):
    """Level-colored console formatter."""

    grey = "\x1b[38;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    blue = "\x1b[34;21m"
    reset = "\x1b[0m"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: blue,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def format(self, record):
        # Color a copy so file handlers sharing the record see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, self.grey)
        record.levelname = f"{color}{record.levelname}{self.reset}"
        return f"{super().format(record)}{self.reset}"


class _LoggerPrefixFilter(logging.Filter):
    """Pass only records whose logger name starts with one of the prefixes."""

    def __init__(self, *prefixes: str):
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(self.prefixes)


def _rotating_handler(config: LogConfig, filename: str, formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        Path(config.log_dir) / filename,
        maxBytes=config.max_file_size,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(getattr(logging, config.level.upper()))
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Optional[LogConfig] = None) -> None:
    """Install handlers on the root logger. Safe to call more than once.

    - Console handler writes directly (stdout is non-blocking)
    - app.log receives everything; auth.log and devices.log receive the
      auth and device loggers respectively
    - File handlers run behind a QueueListener thread
    """
    global _queue_listener

    if config is None:
        config = LogConfig()

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None

    if config.enable_file_logging:
        Path(config.log_dir).mkdir(parents=True, exist_ok=True)

    level = getattr(logging, config.level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            ColoredFormatter(
                fmt="%(asctime)s | %(name)s | %(levelname)s | %(correlation_id)s | %(message)s",
                datefmt=config.date_format,
            )
        )
        console_handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(console_handler)

    file_handlers = []

    if config.enable_file_logging:
        file_formatter = logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(levelname)s | %(correlation_id)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt=config.date_format,
        )

        file_handlers.append(_rotating_handler(config, "app.log", file_formatter))

        auth_handler = _rotating_handler(config, "auth.log", file_formatter)
        auth_handler.addFilter(_LoggerPrefixFilter("auth.", "api.services.auth_service"))
        file_handlers.append(auth_handler)

        device_handler = _rotating_handler(config, "devices.log", file_formatter)
        device_handler.addFilter(
            _LoggerPrefixFilter("device.", "api.services.mqtt_bridge", "api.services.pump_controller")
        )
        file_handlers.append(device_handler)

    if file_handlers:
        log_queue = queue.Queue(-1)
        # The filter runs on the caller side, where the request context is visible
        queue_handler = logging.handlers.QueueHandler(log_queue)
        queue_handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(queue_handler)

        _queue_listener = logging.handlers.QueueListener(
            log_queue,
            *file_handlers,
            respect_handler_level=True,
        )
        _queue_listener.start()
        atexit.register(stop_queue_listener)

    # SQLAlchemy echoes only when explicitly requested
    from .config import settings

    logging.getLogger("sqlalchemy.engine").setLevel(
        level if settings.database.echo else logging.WARNING
    )


def stop_queue_listener() -> None:
    """Flush and stop the file-writing thread. Registered with atexit."""
    global _queue_listener

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None


class AuthLogger:
    """Structured logger for account lifecycle events."""

    def __init__(self, name: str = "core"):
        self.logger = logging.getLogger(f"auth.{name}")

    def user_registered(self, user_id, email: str) -> None:
        self.logger.info(f"User registered | User ID: {user_id} | Email: {email}")

    def login_succeeded(self, user_id, email: str, method: str = "password") -> None:
        self.logger.info(
            f"Login succeeded | User ID: {user_id} | Email: {email} | Method: {method}"
        )

    def login_failed(self, email: str, reason: str) -> None:
        """Log a rejected login. The reason is never returned to the client."""
        self.logger.warning(f"Login failed | Email: {email} | Reason: {reason}")

    def google_user_created(self, user_id, email: str) -> None:
        self.logger.info(f"Google user created | User ID: {user_id} | Email: {email}")

    def email_verified(self, user_id, email: str) -> None:
        self.logger.info(f"Email verified | User ID: {user_id} | Email: {email}")

    def password_reset_requested(self, email: str, user_found: bool) -> None:
        self.logger.info(
            f"Password reset requested | Email: {email} | Account exists: {user_found}"
        )

    def password_reset_completed(self, user_id, email: str) -> None:
        self.logger.info(f"Password reset completed | User ID: {user_id} | Email: {email}")

    def side_effect_failed(self, operation: str, email: str, error: str) -> None:
        """Log a best-effort side effect (e.g. sending mail) that failed."""
        self.logger.error(
            f"Side effect failed | Operation: {operation} | Email: {email} | Error: {error}"
        )


class DeviceLogger:
    """Structured logger for pump, MQTT and telemetry events."""

    def __init__(self, name: str = "bridge"):
        self.logger = logging.getLogger(f"device.{name}")

    def pump_command(self, command: str, source: str, state: Optional[str]) -> None:
        self.logger.info(f"Pump command | Command: {command} | Source: {source} | State: {state}")

    def pump_command_failed(self, command: str, source: str, error: str) -> None:
        self.logger.error(f"Pump command failed | Command: {command} | Source: {source} | Error: {error}")

    def mqtt_message(self, topic: str, payload: str) -> None:
        self.logger.debug(f"MQTT message | Topic: {topic} | Payload: {payload}")

    def reading_recorded(self, status: str, level: float, temperature: float,
                         battery_level: float, alert: str) -> None:
        self.logger.info(
            f"Reading recorded | Status: {status} | Level: {level}% | "
            f"Temp: {temperature}C | Battery: {battery_level}% | Alert: {alert}"
        )

    def alert_condition(self, kind: str, details: str) -> None:
        self.logger.warning(f"Alert condition | Type: {kind} | {details}")
