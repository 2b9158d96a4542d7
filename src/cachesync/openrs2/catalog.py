"""Read and filter the OpenRS2 cache listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Final

import requests
from dacite import from_dict
from dacite.exceptions import DaciteError

from ..errors import UpstreamUnavailable
from ..naming import derive_name
from ..ordering import newest_first, parse_timestamp

SCOPE: Final[str] = "runescape"
GAME: Final[str] = "oldschool"
LANGUAGE: Final[str] = "en"

log = logging.getLogger("openrs2/catalog")


@dataclass(frozen=True, kw_only=True)
class Build:
    """A (major, minor) client build number."""

    major: int
    minor: int | None = None


@dataclass(frozen=True, kw_only=True)
class BundleDescriptor:
    """
    A cache as described by the OpenRS2 listing.

    The first entry of `builds` is the canonical build. The `raw` field
    holds the upstream record verbatim so we can publish it as `info.json`.
    """

    id: int
    scope: str
    game: str
    environment: str
    language: str
    builds: list[Build]
    timestamp: str | None = None
    size: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def build(self) -> int:
        """Return the canonical build major."""
        return self.builds[0].major

    def name(self) -> str:
        """Return the derived name used as manifest key and bucket prefix."""
        assert self.timestamp is not None
        return derive_name(
            game=self.game,
            environment=self.environment,
            build=self.build,
            timestamp=self.timestamp,
            language=self.language,
        )

    def archive_url(self, openrs2_url: str) -> str:
        """Return the URL of the cache `disk.zip` archive."""
        return f"{openrs2_url}/caches/{self.scope}/{self.id}/disk.zip"

    def keys_url(self, openrs2_url: str) -> str:
        """Return the URL of the cache XTEA keys."""
        return f"{openrs2_url}/caches/{self.scope}/{self.id}/keys.json"


def parse_descriptor(record: dict[str, Any]) -> BundleDescriptor:
    """
    Parse a single upstream record.

    Raises:
        DaciteError: if the record does not have the expected shape.
    """
    return replace(from_dict(BundleDescriptor, record), raw=dict(record))


def _accept(desc: BundleDescriptor) -> bool:
    if desc.scope != SCOPE or desc.game != GAME or desc.language != LANGUAGE:
        return False
    if not desc.builds or not desc.timestamp:
        return False
    try:
        parse_timestamp(desc.timestamp)
    except ValueError:
        log.debug("skipping cache %d: invalid timestamp %r", desc.id, desc.timestamp)
        return False
    return True


def select_candidates(records: list[Any]) -> list[BundleDescriptor]:
    """
    Filter the raw listing and sort it newest first.

    Records that do not look like caches are skipped. Candidates are sorted
    by descending canonical build and then by descending timestamp; exact
    ties keep the listing order.
    """
    accepted: list[BundleDescriptor] = []
    for record in records:
        if not isinstance(record, dict):
            log.debug("skipping non-object record: %r", record)
            continue
        try:
            desc = parse_descriptor(record)
        except DaciteError as exc:
            log.debug("skipping malformed record %r: %s", record.get("id"), exc)
            continue
        if _accept(desc):
            accepted.append(desc)
    return newest_first(
        accepted,
        revision=lambda d: d.build,
        timestamp=lambda d: d.timestamp or "",
    )


def list_candidates(
    session: requests.Session,
    *,
    openrs2_url: str,
    timeout: float | None = None,
) -> list[BundleDescriptor]:
    """
    Fetch the OpenRS2 listing and return candidates newest first.

    An empty list means there is nothing to publish.

    Raises:
        UpstreamUnavailable: if the listing cannot be fetched or parsed.
    """
    url = f"{openrs2_url}/caches.json"
    log.info("fetching %s... start", url)
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
        records = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamUnavailable(f"cannot fetch cache listing from {url}: {exc}") from exc
    if not isinstance(records, list):
        raise UpstreamUnavailable(f"unexpected cache listing from {url}: not a list")
    log.info("fetching %s... ok (%d records)", url, len(records))

    candidates = select_candidates(records)
    log.info("found %d candidate cache(s)", len(candidates))
    return candidates
