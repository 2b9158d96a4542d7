"""
Client for the OpenRS2 cache archive.

The archive exposes:

    {archive}/caches.json
        Listing of every known cache.

    {archive}/caches/{scope}/{id}/disk.zip
        The cache files in the `disk` layout.

    {archive}/caches/{scope}/{id}/keys.json
        The XTEA keys as a list of {"group": N, "key": "..."} objects.
"""

from .catalog import Build, BundleDescriptor, list_candidates, select_candidates
from .fetcher import fetch

__all__ = [
    "Build",
    "BundleDescriptor",
    "fetch",
    "list_candidates",
    "select_candidates",
]
