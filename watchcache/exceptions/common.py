from typing import Optional


class WatchCacheException(Exception):
    """Base exception for the watch weather cache."""
    def __init__(self, message: str):
        super().__init__(message)


class FetchError(WatchCacheException):
    """Raised when an upstream call fails or its body is not a usable document."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        self.endpoint = endpoint
        super().__init__(message)


class ConfigurationError(WatchCacheException):
    """Raised when required process configuration is missing."""
