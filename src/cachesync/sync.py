"""
Synchronize the R2 bucket with the newest OpenRS2 cache.

A cycle moves through the following states:

    IDLE -> READ_MANIFEST -> LIST_UPSTREAM -> DECIDE -> NOOP
                                                     -> STAGE -> UPLOAD
                                                        -> MERGE_MANIFEST
                                                        -> PRUNE -> COMMIT
                                                        -> DONE

DECIDE moves to NOOP when the newest candidate is already published, or
when retention would drop it right away because `keep` newer caches are
already published.

Any state may move to FAILED. Writing the manifest in COMMIT is the only
change visible to readers: a failure before that leaves the previously
published manifest untouched (uploaded files of the new cache may be left
behind but nothing references them).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

from .bucket import (
    Decision,
    Manifest,
    ManifestStore,
    Pruner,
    decide,
    entry_for,
    merge,
    prune,
    publish,
)
from .bucket.client import new_client
from .config import CACHES_PREFIX, SyncConfig
from .errors import SyncError, SyncFailed
from .openrs2 import fetch, list_candidates
from .staging import StagingRoot

log = logging.getLogger("sync")


class SyncState(str, Enum):
    """States of a sync cycle."""

    IDLE = "idle"
    READ_MANIFEST = "read_manifest"
    LIST_UPSTREAM = "list_upstream"
    DECIDE = "decide"
    NOOP = "noop"
    STAGE = "stage"
    UPLOAD = "upload"
    MERGE_MANIFEST = "merge_manifest"
    PRUNE = "prune"
    COMMIT = "commit"
    DONE = "done"
    FAILED = "failed"


@dataclass(kw_only=True)
class SyncResult:
    """
    Outcome of a successful sync cycle.

    Attributes:
        state: either NOOP or DONE.
        name: the name of the newest candidate, if any.
        manifest: the manifest as published at the end of the cycle.
        removed: entries removed by the retention policy.
        uploaded: number of uploaded cache files.
    """

    state: SyncState
    name: str | None = None
    manifest: Manifest = field(default_factory=list)
    removed: Manifest = field(default_factory=list)
    uploaded: int = 0


class Synchronizer:
    """Run a single sync cycle using the given configuration and clients."""

    def __init__(
        self,
        *,
        config: SyncConfig,
        session: requests.Session,
        client: Any,
    ) -> None:
        self.config = config
        self.session = session
        self.client = client
        self.store = ManifestStore(
            session=session,
            client=client,
            bucket=config.bucket,
            public_url=config.public_url,
            timeout=config.timeout,
        )
        self.pruner = Pruner(client=client, bucket=config.bucket, keep=config.keep)
        self.state = SyncState.IDLE

    def run(self) -> SyncResult:
        """
        Run the cycle and return its result.

        The staging directory is removed on every exit path.

        Raises:
            SyncError: on failure, with `state` set to the failing state.
                Unexpected exceptions are wrapped into SyncFailed.
        """
        try:
            with StagingRoot(self.config.staging_dir) as staging:
                return self._run(staging)
        except SyncError as exc:
            exc.state = self.state.value
            self._transition(SyncState.FAILED)
            raise
        except Exception as exc:
            failed = SyncFailed(f"unexpected error: {exc}")
            failed.state = self.state.value
            self._transition(SyncState.FAILED)
            raise failed from exc

    def _run(self, staging: StagingRoot) -> SyncResult:
        self._transition(SyncState.READ_MANIFEST)
        current = self.store.read()

        self._transition(SyncState.LIST_UPSTREAM)
        candidates = list_candidates(
            self.session,
            openrs2_url=self.config.openrs2_url,
            timeout=self.config.timeout,
        )

        self._transition(SyncState.DECIDE)
        if not candidates:
            log.info("no valid caches found on OpenRS2")
            return self._noop(current, None)
        latest = candidates[0]
        name = latest.name()
        if decide({entry.name for entry in current}, name) == Decision.NOOP:
            log.info("latest cache %s is already published", name)
            return self._noop(current, name)
        entry = entry_for(latest)
        retained, _ = prune(merge(current, entry), self.config.keep)
        if entry not in retained:
            log.warning(
                "skipping %s: older than the %d newest published caches", name, self.config.keep
            )
            return self._noop(current, name)
        log.info("new cache found: %s", name)

        self._transition(SyncState.STAGE)
        bundle_dir = staging.prepare(name)
        fetch(
            self.session,
            latest,
            bundle_dir,
            openrs2_url=self.config.openrs2_url,
            timeout=self.config.timeout,
        )

        self._transition(SyncState.UPLOAD)
        uploaded = publish(self.client, self.config.bucket, bundle_dir, f"{CACHES_PREFIX}/{name}")
        staging.cleanup()

        self._transition(SyncState.MERGE_MANIFEST)
        merged = merge(current, entry)

        # A deletion failure propagates before COMMIT, leaving the
        # previous manifest published.
        self._transition(SyncState.PRUNE)
        retained, removed = self.pruner.apply(merged)

        self._transition(SyncState.COMMIT)
        self.store.write(retained)

        self._transition(SyncState.DONE)
        return SyncResult(
            state=SyncState.DONE,
            name=name,
            manifest=retained,
            removed=removed,
            uploaded=uploaded,
        )

    def _noop(self, current: Manifest, name: str | None) -> SyncResult:
        self._transition(SyncState.NOOP)
        return SyncResult(state=SyncState.NOOP, name=name, manifest=current)

    def _transition(self, state: SyncState) -> None:
        log.debug("state %s -> %s", self.state.value, state.value)
        self.state = state


def create(config: SyncConfig) -> Synchronizer:
    """Create a Synchronizer talking with the real OpenRS2 archive and R2 bucket."""
    return Synchronizer(
        config=config,
        session=requests.Session(),
        client=new_client(config),
    )
