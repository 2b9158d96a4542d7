"""Download a cache archive and its keys into a staging directory."""

from __future__ import annotations

import json
import logging
import zipfile
from pathlib import Path
from tempfile import TemporaryFile
from typing import IO, Any

import requests
from tqdm import tqdm

from ..errors import DownloadFailed, ExtractionFailed
from .catalog import BundleDescriptor

KEYS_FILENAME = "keys.json"
INFO_FILENAME = "info.json"

log = logging.getLogger("openrs2/fetcher")


def fetch(
    session: requests.Session,
    desc: BundleDescriptor,
    dest_dir: Path,
    *,
    openrs2_url: str,
    timeout: float | None = None,
) -> None:
    """
    Stage the given cache inside dest_dir.

    After this function returns, dest_dir contains the extracted
    `disk.zip` contents, `keys.json` mapping group IDs (as strings)
    to XTEA keys, and `info.json` mirroring the upstream record.

    Partially staged files are left behind on failure: the caller owns
    dest_dir and is expected to remove it.

    Raises:
        DownloadFailed: if the archive or the keys cannot be downloaded.
        ExtractionFailed: if the archive cannot be extracted.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)

    with TemporaryFile() as archive:
        _download(session, desc.archive_url(openrs2_url), archive, timeout=timeout)
        archive.seek(0)
        extract_archive(archive, dest_dir)

    keys = _download_keys(session, desc.keys_url(openrs2_url), timeout=timeout)
    (dest_dir / KEYS_FILENAME).write_text(json.dumps(keys))

    write_info(desc, dest_dir)


def _download(
    session: requests.Session,
    url: str,
    filep: IO[bytes],
    *,
    timeout: float | None,
) -> None:
    log.info("fetching %s... start", url)
    try:
        with session.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            total = resp.headers.get("Content-Length")
            total = int(total) if total is not None else None
            with tqdm(
                total=total,
                unit="B",
                unit_scale=True,
                unit_divisor=1024,
                desc=url.rsplit("/", 2)[-2] + "/disk.zip",
                leave=True,
            ) as pbar:
                for chunk in resp.iter_content(chunk_size=8192):
                    filep.write(chunk)
                    pbar.update(len(chunk))
    except requests.RequestException as exc:
        raise DownloadFailed(f"cannot download {url}: {exc}") from exc
    log.info("fetching %s... ok", url)


def extract_archive(archive: IO[bytes], dest_dir: Path) -> None:
    """
    Extract a zip archive into dest_dir preserving internal paths.

    Raises:
        ExtractionFailed: if the archive is invalid or a member
            would be written outside dest_dir.
    """
    root = dest_dir.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            for member in zf.namelist():
                target = (root / member).resolve()
                if not target.is_relative_to(root):
                    raise ExtractionFailed(f"archive member escapes destination: {member}")
            zf.extractall(root)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ExtractionFailed(f"cannot extract archive into {dest_dir}: {exc}") from exc


def _download_keys(
    session: requests.Session,
    url: str,
    *,
    timeout: float | None,
) -> dict[str, str]:
    log.info("fetching %s... start", url)
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise DownloadFailed(f"cannot download {url}: {exc}") from exc
    try:
        keys = rewrite_keys(payload)
    except (KeyError, TypeError) as exc:
        raise DownloadFailed(f"unexpected keys payload from {url}: {exc}") from exc
    log.info("fetching %s... ok (%d keys)", url, len(keys))
    return keys


def rewrite_keys(entries: list[dict[str, Any]]) -> dict[str, str]:
    """
    Rewrite the OpenRS2 keys list into a mapping keyed by group ID.

    For example, `[{"group": 5, "key": "abc"}]` becomes `{"5": "abc"}`.

    Raises:
        TypeError: if entries is not a list of objects.
        KeyError: if an entry lacks `group` or `key`.
    """
    if not isinstance(entries, list):
        raise TypeError(f"expected a list, got {type(entries).__name__}")
    return {str(entry["group"]): entry["key"] for entry in entries}


def write_info(desc: BundleDescriptor, dest_dir: Path) -> Path:
    """Write the upstream record for desc as `info.json` and return its path."""
    path = dest_dir / INFO_FILENAME
    path.write_text(json.dumps(desc.raw, indent=2))
    return path
