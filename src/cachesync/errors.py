"""Errors raised while synchronizing the cache bucket."""

from __future__ import annotations


class SyncError(RuntimeError):
    """
    Base class for all the errors emitted by cachesync.

    The orchestrator sets `state` to the name of the sync state
    that was running when the error occurred, so that the top-level
    handler can tell where the cycle stopped.
    """

    state: str | None = None


class ConfigurationError(SyncError):
    """Missing or invalid configuration (e.g., missing credentials)."""


class UpstreamUnavailable(SyncError):
    """The OpenRS2 cache listing cannot be fetched or parsed."""


class ManifestReadSoftFailure(SyncError):
    """
    The published manifest could not be read for a reason other than 404.

    The manifest store catches this error, logs a warning and continues
    with an empty manifest.
    """


class DownloadFailed(SyncError):
    """Downloading the cache archive or its keys failed."""


class ExtractionFailed(SyncError):
    """Extracting the cache archive failed."""


class PublishFailed(SyncError):
    """Uploading files or the manifest to the bucket failed."""


class DeletionFailed(SyncError):
    """Deleting the objects of a pruned cache failed."""


class SyncFailed(SyncError):
    """Wraps unexpected errors occurred inside a sync state."""
