"""Logging configuration for containerctl.

Log records go to stderr so that stdout only carries command output
(container ids, followed log lines, inspect payloads). When no format is
configured, an interactive terminal gets the console renderer and anything
else (pipes, CI, log shippers) gets JSON.
"""

# Standard library imports
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

# Third-party imports
import structlog

# Local application imports
from .._version import __version__
from ..config import Settings, settings as default_settings


def resolve_log_format(app_settings: Settings, stream=None) -> str:
    """Return the configured log format, or pick one from the output stream."""
    if app_settings.log_format:
        return app_settings.log_format
    stream = stream if stream is not None else sys.stderr
    isatty = getattr(stream, "isatty", None)
    return "console" if isatty is not None and isatty() else "json"


def setup_logging(app_settings: Optional[Settings] = None) -> None:
    """Configure structured logging for the CLI."""
    app_settings = app_settings or default_settings
    log_format = resolve_log_format(app_settings)
    level = getattr(logging, app_settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if app_settings.log_file:
        setup_file_logging(app_settings, log_format)

    configure_third_party_loggers()


def setup_file_logging(app_settings: Settings, log_format: str) -> None:
    """Add a rotating file handler next to the stderr output."""
    log_file_path = Path(app_settings.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file_path,
        maxBytes=app_settings.log_max_size_mb * 1024 * 1024,
        backupCount=app_settings.log_backup_count,
        encoding="utf-8",
    )

    if log_format == "json":
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    file_handler.setFormatter(formatter)
    file_handler.setLevel(getattr(logging, app_settings.log_level.upper(), logging.INFO))
    logging.getLogger().addHandler(file_handler)


def configure_third_party_loggers() -> None:
    """Configure logging levels for third-party libraries."""
    # docker-py logs every HTTP request at DEBUG through urllib3
    logging.getLogger("docker").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def add_service_context(logger, method_name, event_dict):
    """Add service context information to log entries."""
    event_dict["service"] = "containerctl"
    event_dict["version"] = __version__
    return event_dict


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)
