"""Utility modules for containerctl."""

from .logging import setup_logging, get_logger
from .config_validator import (
    ConfigValidator,
    REQUIRED_SETTING_KEYS,
    get_configuration_summary,
    required_setting_keys,
    validate_configuration,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "ConfigValidator",
    "REQUIRED_SETTING_KEYS",
    "get_configuration_summary",
    "required_setting_keys",
    "validate_configuration",
]
