"""
Error taxonomy for the ingestion pipeline.
"""

from typing import Optional


class IngestError(Exception):
    """Base class for pipeline errors."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url


class NetworkError(IngestError):
    """Feed or sink transport failure, including timeouts."""


class RenderError(IngestError):
    """Navigation, timeout or DOM read failure for one article."""


class ValidationError(IngestError):
    """Missing or invalid request input."""


class SinkError(IngestError):
    """Persistence call returned a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
