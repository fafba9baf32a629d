"""Configuration validation utilities."""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit

import structlog

from ..config.docker import (
    DOCKER_CERT_PATH,
    DOCKER_SERVER_ADDRESS,
    DOCKER_URI,
    DOCKER_VERSION,
)
from ..models.errors import MissingConfigurationError

logger = structlog.get_logger(__name__)

# Order matters: the first missing key is the one reported
REQUIRED_SETTING_KEYS = (DOCKER_VERSION, DOCKER_URI, DOCKER_SERVER_ADDRESS, DOCKER_CERT_PATH)

TLS_FILES = ("ca.pem", "cert.pem", "key.pem")

# Schemes that address a network endpoint and therefore need a host
NETWORK_SCHEMES = ("tcp", "http", "https")


def required_setting_keys() -> List[str]:
    """Return the property keys required to initialize the Docker client."""
    return list(REQUIRED_SETTING_KEYS)


def validate_configuration(properties: Mapping[str, Optional[str]]) -> Mapping[str, Optional[str]]:
    """Check that every required setting is present.

    Empty strings count as present. Values are not parsed or coerced here;
    malformed values surface when the engine connection is attempted.

    Raises:
        MissingConfigurationError: naming the first missing key and listing
            all of them.
    """
    missing = [key for key in REQUIRED_SETTING_KEYS if properties.get(key) is None]
    if missing:
        error = MissingConfigurationError(missing[0], missing_keys=missing)
        logger.error(error.message, missing_keys=missing)
        raise error
    return properties


def has_tls_material(cert_path: Optional[str]) -> bool:
    """Check whether a certificate directory holds the client TLS files."""
    if not cert_path:
        return False
    directory = Path(cert_path)
    return directory.is_dir() and all((directory / name).is_file() for name in TLS_FILES)


class ConfigValidator:
    """Reviews engine connection settings without contacting the engine."""

    def __init__(self, properties: Mapping[str, Optional[str]]):
        self.properties = properties
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> bool:
        """Validate all connection settings. Returns True when there are no errors."""
        self.errors.clear()
        self.warnings.clear()

        self._validate_required()
        self._validate_uri()
        self._validate_cert_path()

        if self.warnings:
            for warning in self.warnings:
                logger.warning(f"Configuration warning: {warning}")

        if self.errors:
            for error in self.errors:
                logger.error(f"Configuration error: {error}")
            return False

        return True

    def _validate_required(self):
        """Check required keys and flag empty values."""
        for key in REQUIRED_SETTING_KEYS:
            value = self.properties.get(key)
            if value is None:
                self.errors.append(f"{key} is not set")
            elif value == "":
                self.warnings.append(f"{key} is empty")

    def _validate_uri(self):
        """Check that a network endpoint URI names a host."""
        uri = self.properties.get(DOCKER_URI)
        if not uri:
            return

        try:
            parts = urlsplit(uri)
            host = parts.hostname
            # urlsplit defers port parsing until the attribute is read
            _ = parts.port
        except ValueError as e:
            self.errors.append(f"Cannot parse {DOCKER_URI} '{uri}': {e}")
            return

        if parts.scheme in NETWORK_SCHEMES and not host:
            self.warnings.append(f"{DOCKER_URI} '{uri}' has no host component")

    def _validate_cert_path(self):
        """Check that a configured certificate directory is usable for TLS."""
        cert_path = self.properties.get(DOCKER_CERT_PATH)
        if not cert_path:
            return

        if not Path(cert_path).is_dir():
            self.warnings.append(
                f"{DOCKER_CERT_PATH} '{cert_path}' is not a directory - TLS will not be used"
            )
        elif not has_tls_material(cert_path):
            self.warnings.append(
                f"{DOCKER_CERT_PATH} '{cert_path}' does not contain {', '.join(TLS_FILES)} "
                "- TLS will not be used"
            )


def get_configuration_summary(properties: Mapping[str, Optional[str]]) -> Dict[str, Any]:
    """Get a summary of the connection settings for debugging."""
    return {
        "api_version": properties.get(DOCKER_VERSION),
        "uri": properties.get(DOCKER_URI),
        "server_address": properties.get(DOCKER_SERVER_ADDRESS),
        "cert_path": properties.get(DOCKER_CERT_PATH),
        "tls": has_tls_material(properties.get(DOCKER_CERT_PATH)),
    }
