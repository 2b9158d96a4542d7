"""Create the S3 client used to talk with the R2 bucket."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config as BotoConfig

from ..config import SyncConfig


def new_client(config: SyncConfig) -> Any:
    """Return a boto3 S3 client bound to the R2 endpoint of the given account."""
    session = boto3.Session(
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        region_name="auto",
    )
    return session.client(
        "s3",
        region_name="auto",
        endpoint_url=config.endpoint_url,
        config=BotoConfig(
            connect_timeout=config.timeout or 60,
            read_timeout=config.timeout or 60,
            signature_version="s3v4",
        ),
    )
