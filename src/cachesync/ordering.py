"""Newest-first ordering shared by the upstream catalog and the manifest."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import TypeVar

T = TypeVar("T")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    A trailing `Z` is accepted and naive timestamps are assumed to be UTC.

    Raises:
        ValueError: if the value is not a valid ISO-8601 timestamp.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def newest_first(
    items: Iterable[T],
    *,
    revision: Callable[[T], int],
    timestamp: Callable[[T], str],
) -> list[T]:
    """
    Sort items descending by (revision, timestamp).

    The sort is stable: items with identical revision and timestamp
    keep their relative input order.
    """
    return sorted(
        items,
        key=lambda item: (revision(item), parse_timestamp(timestamp(item))),
        reverse=True,
    )
