"""
Services package initialization.
"""

from watchcache.services.snapshot_store import SnapshotStore
from watchcache.services.provider_client import ProviderClient, FullForecast

__all__ = [
    "SnapshotStore",
    "ProviderClient",
    "FullForecast",
]
