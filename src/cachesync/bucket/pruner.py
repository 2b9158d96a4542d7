"""Apply the retention policy to the published caches."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ..config import CACHES_PREFIX
from ..errors import DeletionFailed
from .manifest import Manifest

log = logging.getLogger("bucket/pruner")


def prune(manifest: Manifest, keep: int) -> tuple[Manifest, Manifest]:
    """
    Split a newest-first manifest into (retained, removed).

    Raises:
        ValueError: if keep is less than one.
    """
    if keep < 1:
        raise ValueError(f"keep must be >= 1, got {keep}")
    return list(manifest[:keep]), list(manifest[keep:])


def delete_prefix(client: Any, bucket: str, prefix: str) -> int:
    """
    Delete every object whose key starts with `{prefix}/`.

    Follows the listing continuation token until exhausted and
    deletes each listed page with a single batch request.

    Returns:
        The number of deleted objects.

    Raises:
        DeletionFailed: if listing or deleting fails, including when the
            batch response reports per-key errors.
    """
    dir_prefix = prefix if prefix.endswith("/") else f"{prefix}/"
    deleted = 0
    token: str | None = None
    while True:
        kwargs: dict[str, Any] = {"Bucket": bucket, "Prefix": dir_prefix}
        if token is not None:
            kwargs["ContinuationToken"] = token
        try:
            listing = client.list_objects_v2(**kwargs)
            objects = [{"Key": obj["Key"]} for obj in listing.get("Contents", [])]
            if objects:
                result = client.delete_objects(Bucket=bucket, Delete={"Objects": objects})
                errors = result.get("Errors", [])
                if errors:
                    first = errors[0]
                    raise DeletionFailed(
                        f"cannot delete {len(errors)} object(s) under {dir_prefix}: "
                        f"{first.get('Key')}: {first.get('Message')}"
                    )
                deleted += len(objects)
                log.info("deleted %d object(s) from %s", len(objects), dir_prefix)
        except (BotoCoreError, ClientError) as exc:
            raise DeletionFailed(f"cannot delete objects under {dir_prefix}: {exc}") from exc
        token = listing.get("NextContinuationToken")
        if not token:
            return deleted


class Pruner:
    """Truncate the manifest to `keep` entries and delete the removed caches."""

    def __init__(self, *, client: Any, bucket: str, keep: int) -> None:
        self.client = client
        self.bucket = bucket
        self.keep = keep

    def apply(self, manifest: Manifest) -> tuple[Manifest, Manifest]:
        """
        Return (retained, removed) after deleting the removed caches.

        The first deletion failure aborts the pruning and propagates.

        Raises:
            DeletionFailed: if deleting the objects of a removed cache fails.
        """
        retained, removed = prune(manifest, self.keep)
        for entry in removed:
            log.info("retention policy: deleting old cache %s... start", entry.name)
            count = delete_prefix(self.client, self.bucket, f"{CACHES_PREFIX}/{entry.name}")
            log.info("retention policy: deleting old cache %s... ok (%d objects)", entry.name, count)
        return retained, removed
