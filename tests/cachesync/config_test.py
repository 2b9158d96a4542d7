"""Tests for the cachesync.config module."""

from pathlib import Path

import pytest

from cachesync.config import DEFAULT_BUCKET, SyncConfig
from cachesync.errors import ConfigurationError

_ENV = {
    "R2_ACCOUNT_ID": "acct",
    "R2_ACCESS_KEY_ID": "key-id",
    "R2_SECRET_ACCESS_KEY": "secret",
}

_OPTIONAL = (
    "R2_BUCKET_NAME",
    "R2_PUBLIC_URL",
    "OPENRS2_URL",
    "CACHESYNC_STAGING_DIR",
    "CACHESYNC_KEEP",
    "CACHESYNC_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no cachesync variables set."""
    for name in (*_ENV, *_OPTIONAL):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def env(clean_env):
    """Set the required credentials in the environment."""
    for name, value in _ENV.items():
        clean_env.setenv(name, value)
    return clean_env


class TestSyncConfigFromEnv:
    """Tests for SyncConfig.from_env."""

    def test_defaults(self, env):
        config = SyncConfig.from_env()
        assert config.account_id == "acct"
        assert config.bucket == DEFAULT_BUCKET
        assert config.keep == 2
        assert config.timeout is None
        assert config.staging_dir == Path(".")
        assert config.endpoint_url == "https://acct.r2.cloudflarestorage.com"

    @pytest.mark.parametrize("missing", sorted(_ENV))
    def test_missing_credentials(self, env, missing: str):
        env.delenv(missing)
        with pytest.raises(ConfigurationError, match=missing):
            SyncConfig.from_env()

    def test_empty_credentials_are_missing(self, env):
        env.setenv("R2_SECRET_ACCESS_KEY", "")
        with pytest.raises(ConfigurationError, match="R2_SECRET_ACCESS_KEY"):
            SyncConfig.from_env()

    def test_empty_optional_value_uses_default(self, env):
        env.setenv("R2_BUCKET_NAME", "")
        assert SyncConfig.from_env().bucket == DEFAULT_BUCKET

    def test_overrides_from_env(self, env):
        env.setenv("R2_BUCKET_NAME", "other")
        env.setenv("R2_PUBLIC_URL", "https://example.com/")
        env.setenv("OPENRS2_URL", "https://mirror.example.com")
        env.setenv("CACHESYNC_STAGING_DIR", "/tmp/stage")
        env.setenv("CACHESYNC_KEEP", "5")
        env.setenv("CACHESYNC_TIMEOUT", "12.5")
        config = SyncConfig.from_env()
        assert config.bucket == "other"
        assert config.public_url == "https://example.com"
        assert config.openrs2_url == "https://mirror.example.com"
        assert config.staging_dir == Path("/tmp/stage")
        assert config.keep == 5
        assert config.timeout == 12.5

    @pytest.mark.parametrize("value", ["zero", "0", "-1"])
    def test_invalid_keep(self, env, value: str):
        env.setenv("CACHESYNC_KEEP", value)
        with pytest.raises(ConfigurationError, match="CACHESYNC_KEEP"):
            SyncConfig.from_env()

    def test_config_is_frozen(self, env):
        config = SyncConfig.from_env()
        with pytest.raises(ValueError):
            config.keep = 3


class TestSyncConfigDotEnv:
    """Values are also read from a .env file in the working directory."""

    def test_credentials_from_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text(
            "R2_ACCOUNT_ID=dotenv-acct\n"
            "R2_ACCESS_KEY_ID=dotenv-id\n"
            "R2_SECRET_ACCESS_KEY=dotenv-secret\n"
            "CACHESYNC_KEEP=3\n"
        )
        config = SyncConfig.from_env()
        assert config.account_id == "dotenv-acct"
        assert config.access_key_id == "dotenv-id"
        assert config.secret_access_key == "dotenv-secret"
        assert config.keep == 3

    def test_environment_wins_over_dotenv(self, env, tmp_path):
        (tmp_path / ".env").write_text("R2_ACCOUNT_ID=dotenv-acct\nR2_BUCKET_NAME=from-file\n")
        config = SyncConfig.from_env()
        assert config.account_id == "acct"
        assert config.bucket == "from-file"

    def test_explicit_env_file(self, clean_env, tmp_path):
        path = tmp_path / "prod.env"
        path.write_text(
            "R2_ACCOUNT_ID=a\nR2_ACCESS_KEY_ID=b\nR2_SECRET_ACCESS_KEY=c\n"
        )
        assert SyncConfig.from_env(path).account_id == "a"

    def test_dotenv_ignored_when_disabled(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text(
            "R2_ACCOUNT_ID=a\nR2_ACCESS_KEY_ID=b\nR2_SECRET_ACCESS_KEY=c\n"
        )
        with pytest.raises(ConfigurationError):
            SyncConfig.from_env(None)


class TestSyncConfigWithOverrides:
    """Tests for SyncConfig.with_overrides."""

    def test_none_values_are_ignored(self, env):
        config = SyncConfig.from_env()
        assert config.with_overrides() == config

    def test_values_are_replaced(self, env):
        config = SyncConfig.from_env().with_overrides(bucket="b", staging_dir="stage", keep=3)
        assert config.bucket == "b"
        assert config.staging_dir == Path("stage")
        assert config.keep == 3
        assert config.account_id == "acct"

    def test_invalid_keep(self, env):
        with pytest.raises(ConfigurationError):
            SyncConfig.from_env().with_overrides(keep=0)
