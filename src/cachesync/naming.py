"""Derive the directory name under which a cache is published."""

from __future__ import annotations

from typing import Final

OLDSCHOOL_GAME: Final[str] = "oldschool"
DEFAULT_LANGUAGE: Final[str] = "en"


def cache_date(timestamp: str) -> str:
    """Return the YYYY-MM-DD date portion of an ISO-8601 timestamp."""
    return timestamp.split("T")[0]


def derive_name(
    *,
    game: str,
    environment: str,
    build: int,
    timestamp: str,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    """
    Return the deterministic name of a cache.

    The name is both the manifest key and the bucket prefix, e.g.:

        osrs-231_2024-05-01
        osrs-beta-231_2024-05-01
        rs2-900-de_2024-05-01
    """
    date = cache_date(timestamp)
    if game == OLDSCHOOL_GAME:
        if environment == "beta":
            return f"osrs-beta-{build}_{date}"
        return f"osrs-{build}_{date}"
    suffix = f"-{language}" if language != DEFAULT_LANGUAGE else ""
    return f"rs2-{build}{suffix}_{date}"
