"""Watch weather cache exceptions."""

from .common import (
    WatchCacheException,
    FetchError,
    ConfigurationError,
)

__all__ = [
    "WatchCacheException",
    "FetchError",
    "ConfigurationError",
]
