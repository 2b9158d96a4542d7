"""Module containing the cachesync runtime configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_BUCKET: Final[str] = "osrs-caches"
DEFAULT_PUBLIC_URL: Final[str] = "https://caches.osrstabletop.com"
DEFAULT_OPENRS2_URL: Final[str] = "https://archive.openrs2.org"
DEFAULT_WORK_DIR: Final[str] = "."
DEFAULT_KEEP: Final[int] = 2

MANIFEST_KEY: Final[str] = "caches.json"
CACHES_PREFIX: Final[str] = "caches"


class SyncConfig(BaseSettings):
    """
    Configuration for a single sync cycle.

    Values are read from the environment and from a `.env` file in the
    current directory, with the environment taking precedence:

        R2_ACCOUNT_ID=...           (required)
        R2_ACCESS_KEY_ID=...        (required)
        R2_SECRET_ACCESS_KEY=...    (required)
        R2_BUCKET_NAME=osrs-caches
        R2_PUBLIC_URL=https://caches.osrstabletop.com
        OPENRS2_URL=https://archive.openrs2.org
        CACHESYNC_STAGING_DIR=.
        CACHESYNC_KEEP=2
        CACHESYNC_TIMEOUT=30

    Empty values count as unset. The staging directory is the parent of
    the directory a sync cycle creates (and removes) for itself.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    account_id: str = Field(min_length=1, validation_alias="R2_ACCOUNT_ID")
    access_key_id: str = Field(min_length=1, validation_alias="R2_ACCESS_KEY_ID")
    secret_access_key: str = Field(min_length=1, validation_alias="R2_SECRET_ACCESS_KEY")
    bucket: str = Field(default=DEFAULT_BUCKET, min_length=1, validation_alias="R2_BUCKET_NAME")
    public_url: str = Field(default=DEFAULT_PUBLIC_URL, validation_alias="R2_PUBLIC_URL")
    openrs2_url: str = Field(default=DEFAULT_OPENRS2_URL, validation_alias="OPENRS2_URL")
    staging_dir: Path = Field(default=Path(DEFAULT_WORK_DIR), validation_alias="CACHESYNC_STAGING_DIR")
    keep: int = Field(default=DEFAULT_KEEP, ge=1, validation_alias="CACHESYNC_KEEP")
    timeout: float | None = Field(default=None, gt=0, validation_alias="CACHESYNC_TIMEOUT")

    @field_validator("public_url", "openrs2_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def endpoint_url(self) -> str:
        """Return the S3-compatible endpoint for the R2 account."""
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    @classmethod
    def from_env(cls, env_file: str | Path | None = ".env") -> SyncConfig:
        """
        Build the configuration from the environment and the given env file.

        Raises:
            ConfigurationError: if credentials are missing or a value is invalid.
        """
        try:
            return cls(_env_file=env_file)
        except ValidationError as exc:
            raise ConfigurationError(_describe(exc)) from exc

    def with_overrides(
        self,
        *,
        bucket: str | None = None,
        staging_dir: str | Path | None = None,
        keep: int | None = None,
    ) -> SyncConfig:
        """
        Return a validated copy of the config with the given non-None values replaced.

        Raises:
            ConfigurationError: if a replaced value is invalid.
        """
        changes: dict[str, Any] = {
            name: value
            for name, value in (("bucket", bucket), ("staging_dir", staging_dir), ("keep", keep))
            if value is not None
        }
        try:
            return type(self).model_validate({**self.model_dump(), **changes})
        except ValidationError as exc:
            raise ConfigurationError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        where = ".".join(str(part) for part in error["loc"])
        problems.append(f"{where}: {error['msg']}")
    return "invalid configuration (check your environment or .env file): " + "; ".join(problems)
