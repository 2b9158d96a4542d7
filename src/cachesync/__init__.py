"""OSRS cache synchronizer.

This library keeps an R2 bucket in sync with the newest Old School
RuneScape cache published by the OpenRS2 archive, along with a
`caches.json` manifest listing the retained caches newest first.
"""

from importlib.metadata import PackageNotFoundError, version

from .config import SyncConfig
from .errors import (
    ConfigurationError,
    DeletionFailed,
    DownloadFailed,
    ExtractionFailed,
    ManifestReadSoftFailure,
    PublishFailed,
    SyncError,
    SyncFailed,
    UpstreamUnavailable,
)
from .naming import derive_name
from .sync import SyncResult, SyncState, Synchronizer

try:
    __version__ = version("osrs-cache-sync")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = [
    "ConfigurationError",
    "DeletionFailed",
    "DownloadFailed",
    "ExtractionFailed",
    "ManifestReadSoftFailure",
    "PublishFailed",
    "SyncConfig",
    "SyncError",
    "SyncFailed",
    "SyncResult",
    "SyncState",
    "Synchronizer",
    "UpstreamUnavailable",
    "derive_name",
    "__version__",
]
