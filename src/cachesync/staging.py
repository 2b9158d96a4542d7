"""Local staging directory owned by a single sync cycle."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Final

STAGING_DIRNAME: Final[str] = "temp_cache_download"

log = logging.getLogger("staging")


class StagingRoot:
    """
    Context manager owning a staging directory below a work directory.

    Use as a context manager around the whole sync cycle:

        with StagingRoot(Path(".")) as staging:
            ...
            bundle_dir = staging.prepare("osrs-231_2024-05-01")
            ...

    Only `<work_dir>/temp_cache_download` belongs to the cycle: `prepare`
    removes any leftover copy of it (e.g., from a crashed run) and creates
    a fresh one, and exiting the context always removes it, whether the
    body succeeded, returned early, or raised. Nothing else inside the
    work directory is touched, and the work directory itself is kept.
    """

    def __init__(self, work_dir: Path) -> None:
        self.work_dir = work_dir
        self.path = work_dir / STAGING_DIRNAME

    def __enter__(self) -> StagingRoot:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.cleanup()
        return False

    def prepare(self, name: str) -> Path:
        """Recreate an empty staging directory and return the directory for the named cache."""
        self.cleanup()
        bundle_dir = self.path / name
        bundle_dir.mkdir(parents=True)
        log.debug("created staging directory %s", bundle_dir)
        return bundle_dir

    def cleanup(self) -> None:
        """Remove the staging directory if it exists."""
        if self.path.exists():
            shutil.rmtree(self.path)
            log.debug("removed staging directory %s", self.path)
