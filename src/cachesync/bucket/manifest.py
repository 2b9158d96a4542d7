"""
Read, merge and write the published `caches.json` manifest.

The manifest is a JSON array of entries sorted newest first:

    [
      {
        "name": "osrs-231_2024-05-01",
        "game": "oldschool",
        "environment": "live",
        "revision": 231,
        "timestamp": "2024-05-01T00:00:00Z",
        "size": 123456
      }
    ]

Writing the manifest is the commit point of a sync cycle: a cache is
not published until the manifest lists it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Collection
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

import requests
from botocore.exceptions import BotoCoreError, ClientError
from dacite import from_dict
from dacite.exceptions import DaciteError

from ..config import MANIFEST_KEY
from ..errors import ManifestReadSoftFailure, PublishFailed
from ..openrs2.catalog import BundleDescriptor
from ..ordering import newest_first

log = logging.getLogger("bucket/manifest")


@dataclass(frozen=True, kw_only=True)
class ManifestEntry:
    """A published cache as listed in the manifest."""

    name: str
    game: str
    environment: str
    revision: int
    timestamp: str
    size: int | None = None


Manifest = list[ManifestEntry]
"""Entries sorted descending by (revision, timestamp)."""


class Decision(str, Enum):
    """Outcome of comparing the newest candidate with the manifest."""

    NOOP = "noop"
    PUBLISH = "publish"


def decide(existing_names: Collection[str], candidate_name: str) -> Decision:
    """Return NOOP if the candidate is already published and PUBLISH otherwise."""
    return Decision.NOOP if candidate_name in existing_names else Decision.PUBLISH


def entry_for(desc: BundleDescriptor) -> ManifestEntry:
    """Build the manifest entry describing the given cache."""
    assert desc.timestamp is not None
    return ManifestEntry(
        name=desc.name(),
        game=desc.game,
        environment=desc.environment,
        revision=desc.build,
        timestamp=desc.timestamp,
        size=desc.size,
    )


def merge(manifest: Manifest, entry: ManifestEntry) -> Manifest:
    """
    Prepend entry to manifest and re-sort newest first.

    The input manifest is not modified. Exact ties keep the new
    entry before the existing ones.
    """
    return newest_first(
        [entry, *manifest],
        revision=lambda e: e.revision,
        timestamp=lambda e: e.timestamp,
    )


def manifest_to_json(manifest: Manifest) -> str:
    """Serialize the manifest preserving the entries order."""
    return json.dumps([asdict(entry) for entry in manifest])


def manifest_from_json(data: Any) -> Manifest:
    """
    Parse an already-decoded JSON manifest.

    Raises:
        ValueError: if data is not a list.
        DaciteError: if an entry has the wrong shape.
    """
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return [from_dict(ManifestEntry, item) for item in data]


class ManifestReader:
    """
    Read the manifest through its public URL.

    Reads are lenient: a missing manifest is an empty manifest, and any
    other read failure is logged and also treated as an empty manifest.
    This favors availability on the first run over safety, since a
    transient read error may cause a redundant re-publish.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        public_url: str,
        timeout: float | None = None,
    ) -> None:
        self.session = session
        self.url = f"{public_url.rstrip('/')}/{MANIFEST_KEY}"
        self.timeout = timeout

    def read(self) -> Manifest:
        """Return the published manifest, or an empty one (see class docs)."""
        try:
            manifest = self._read()
        except ManifestReadSoftFailure as exc:
            log.warning("cannot read %s (first run?): %s", self.url, exc)
            return []
        log.info("manifest has %d entries", len(manifest))
        return manifest

    def _read(self) -> Manifest:
        log.info("fetching %s... start", self.url)
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            if resp.status_code == 404:
                log.info("fetching %s... not found", self.url)
                return []
            resp.raise_for_status()
            manifest = manifest_from_json(resp.json())
        except (requests.RequestException, ValueError, DaciteError) as exc:
            raise ManifestReadSoftFailure(str(exc)) from exc
        log.info("fetching %s... ok", self.url)
        return manifest


class ManifestStore(ManifestReader):
    """Read the manifest through its public URL and write it through the bucket."""

    def __init__(
        self,
        *,
        session: requests.Session,
        client: Any,
        bucket: str,
        public_url: str,
        timeout: float | None = None,
    ) -> None:
        super().__init__(session=session, public_url=public_url, timeout=timeout)
        self.client = client
        self.bucket = bucket

    def write(self, manifest: Manifest) -> None:
        """
        Publish the manifest with caching disabled.

        Raises:
            PublishFailed: if the bucket rejects the write.
        """
        log.info("writing %s (%d entries)... start", MANIFEST_KEY, len(manifest))
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=MANIFEST_KEY,
                Body=manifest_to_json(manifest).encode("utf-8"),
                ContentType="application/json",
                CacheControl="no-cache",
            )
        except (BotoCoreError, ClientError) as exc:
            raise PublishFailed(f"cannot write {MANIFEST_KEY}: {exc}") from exc
        log.info("writing %s (%d entries)... ok", MANIFEST_KEY, len(manifest))
