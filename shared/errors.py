"""
Shared error handling for the document store caching layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Serializable error payload for embedding applications."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class DataSourceException(Exception):
    """Base exception for the caching layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(DataSourceException):
    """Invalid construction options; raised eagerly, never during loads."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class CacheBackendError(DataSourceException):
    """Cache backend could not be reached."""

    def __init__(self, backend: str, message: str = "Cache backend error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_BACKEND_ERROR", f"{backend}: {message}", details)
