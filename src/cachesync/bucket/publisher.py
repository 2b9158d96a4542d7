"""Upload a staged cache directory to the bucket."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from ..errors import PublishFailed

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"

log = logging.getLogger("bucket/publisher")


def content_type_for(path: str) -> str:
    """Return the content type to use when uploading path."""
    return JSON_CONTENT_TYPE if path.endswith(".json") else BINARY_CONTENT_TYPE


def iter_files(local_dir: Path) -> Iterator[tuple[str, Path]]:
    """
    Walk local_dir and yield (relative_path, path) for each regular file.

    Relative paths always use forward slashes. Directories are visited
    with an explicit stack and entries are yielded in sorted order, so
    the walk does not depend on the directory depth.
    """
    stack = [local_dir]
    while stack:
        current = stack.pop()
        children = sorted(current.iterdir(), key=lambda p: p.name)
        subdirs: list[Path] = []
        for child in children:
            if child.is_dir():
                subdirs.append(child)
            elif child.is_file():
                yield child.relative_to(local_dir).as_posix(), child
        # Reverse so that the first subdirectory is popped first.
        stack.extend(reversed(subdirs))


def publish(client: Any, bucket: str, local_dir: Path, remote_prefix: str) -> int:
    """
    Upload every file below local_dir to `{remote_prefix}/{relative_path}`.

    Uploading is idempotent: running it again with the same inputs
    overwrites the same keys with the same content.

    Returns:
        The number of uploaded files.

    Raises:
        PublishFailed: if any upload fails.
    """
    prefix = remote_prefix.rstrip("/")
    files = list(iter_files(local_dir))
    log.info("uploading %d file(s) to %s/... start", len(files), prefix)

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
    ) as progress:
        for rel, path in files:
            key = f"{prefix}/{rel}"
            task_id = progress.add_task(rel, total=path.stat().st_size)
            try:
                client.upload_file(
                    Filename=str(path),
                    Bucket=bucket,
                    Key=key,
                    ExtraArgs={"ContentType": content_type_for(rel)},
                    Callback=lambda n, task_id=task_id: progress.update(task_id, advance=n),
                )
            except (Boto3Error, BotoCoreError, ClientError, OSError) as exc:
                raise PublishFailed(f"cannot upload {key}: {exc}") from exc
            finally:
                progress.remove_task(task_id)
            log.debug("uploaded %s", key)

    log.info("uploading %d file(s) to %s/... ok", len(files), prefix)
    return len(files)
