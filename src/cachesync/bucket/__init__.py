"""
R2 bucket layout and operations.

The bucket contains:

    caches.json
        The manifest listing the published caches, newest first.

    caches/{name}/...
        The extracted cache files, plus `keys.json` and `info.json`.
"""

from .client import new_client
from .manifest import (
    Decision,
    Manifest,
    ManifestEntry,
    ManifestReader,
    ManifestStore,
    decide,
    entry_for,
    merge,
)
from .pruner import Pruner, delete_prefix, prune
from .publisher import iter_files, publish

__all__ = [
    "Decision",
    "Manifest",
    "ManifestEntry",
    "ManifestReader",
    "ManifestStore",
    "Pruner",
    "decide",
    "delete_prefix",
    "entry_for",
    "iter_files",
    "merge",
    "new_client",
    "prune",
    "publish",
]
