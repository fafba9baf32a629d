"""Error models and exception classes for containerctl."""

import time
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Error type enumeration."""

    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    FEED_READ = "feed_read"
    URI_PARSE = "uri_parse"
    ENGINE = "engine"


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: Optional[str] = Field(None, description="Setting or argument the error refers to")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Standardized error payload."""

    error: str = Field(..., description="Main error message")
    error_type: ErrorType = Field(..., description="Error category")
    details: Optional[List[ErrorDetail]] = Field(
        None, description="Additional error details"
    )
    timestamp: float = Field(default_factory=time.time, description="Error timestamp")

    class Config:
        use_enum_values = True


# Custom Exception Classes


class ContainerControlError(Exception):
    """Base exception for containerctl."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.ENGINE,
        details: Optional[List[ErrorDetail]] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.details = details or []
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.message,
            error_type=self.error_type,
            details=self.details if self.details else None,
        )


class MissingConfigurationError(ContainerControlError):
    """One or more required connection settings are absent."""

    def __init__(self, key: str, missing_keys: Optional[Sequence[str]] = None, **kwargs):
        self.key = key
        self.missing_keys = list(missing_keys) if missing_keys else [key]
        message = (
            "Not all required properties were set to initialize docker client. "
            f"{key} property is null"
        )
        details = [
            ErrorDetail(field=k, message=f"{k} is required", code="missing")
            for k in self.missing_keys
        ]
        super().__init__(
            message=message,
            error_type=ErrorType.CONFIGURATION,
            details=details,
            **kwargs,
        )


class EngineConnectionError(ContainerControlError):
    """The Docker engine could not be reached or the handshake failed."""

    def __init__(self, message: str = "Failed to connect to Docker engine", **kwargs):
        super().__init__(message=message, error_type=ErrorType.CONNECTION, **kwargs)


class FeedReadError(ContainerControlError, IOError):
    """Reading an engine feed (pull progress or container logs) failed."""

    def __init__(self, message: str = "Failed to read engine feed", **kwargs):
        super().__init__(message=message, error_type=ErrorType.FEED_READ, **kwargs)


class URIParseError(ContainerControlError, ValueError):
    """The configured endpoint URI could not be parsed."""

    def __init__(self, uri: str, reason: str = None, **kwargs):
        self.uri = uri
        message = f"Invalid Docker endpoint URI: {uri!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message=message, error_type=ErrorType.URI_PARSE, **kwargs)
