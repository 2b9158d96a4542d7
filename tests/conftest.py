"""Shared pytest fixtures for cachesync tests."""

from __future__ import annotations

import io
import json
import logging
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import requests

ARCHIVE = "https://archive.test"
PUBLIC = "https://caches.test"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, *, status_code: int = 200, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content
        self.headers = {"Content-Length": str(len(content))}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return json.loads(self.content)

    def iter_content(self, chunk_size: int = 1) -> Any:
        for idx in range(0, len(self.content), chunk_size):
            yield self.content[idx : idx + chunk_size]

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *args: Any) -> bool:
        return False


class FakeSession:
    """Route GET requests to canned responses, returning 404 for unknown URLs."""

    def __init__(self, routes: dict[str, FakeResponse | Exception] | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[str] = []

    def get(self, url: str, **_kwargs: Any) -> FakeResponse:
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        return route

    def set_json(self, url: str, data: Any) -> None:
        self.routes[url] = FakeResponse(content=json.dumps(data).encode())

    def set_bytes(self, url: str, data: bytes) -> None:
        self.routes[url] = FakeResponse(content=data)


class FakeBucket:
    """In-memory S3 client exposing the subset of calls used by cachesync."""

    def __init__(self, *, page_size: int = 1000) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.cache_control: dict[str, str] = {}
        self.page_size = page_size
        self.puts: list[str] = []
        self.list_calls: list[dict[str, Any]] = []
        self.delete_calls: list[list[str]] = []

    def put_object(self, *, Bucket: str, Key: str, Body: bytes, **kwargs: Any) -> dict:
        self.objects[Key] = Body
        self.content_types[Key] = kwargs.get("ContentType", "")
        if "CacheControl" in kwargs:
            self.cache_control[Key] = kwargs["CacheControl"]
        self.puts.append(Key)
        return {}

    def upload_file(self, *, Filename: str, Bucket: str, Key: str, ExtraArgs=None, Callback=None):
        data = Path(Filename).read_bytes()
        self.objects[Key] = data
        self.content_types[Key] = (ExtraArgs or {}).get("ContentType", "")
        self.puts.append(Key)
        if Callback is not None:
            Callback(len(data))

    def list_objects_v2(self, *, Bucket: str, Prefix: str, ContinuationToken=None) -> dict:
        self.list_calls.append({"Prefix": Prefix, "ContinuationToken": ContinuationToken})
        # The continuation token is the last key of the previous page, so
        # deleting listed objects does not shift the following pages.
        keys = sorted(k for k in self.objects if k.startswith(Prefix))
        if ContinuationToken is not None:
            keys = [k for k in keys if k > ContinuationToken]
        page = keys[: self.page_size]
        result: dict[str, Any] = {"KeyCount": len(page)}
        if page:
            result["Contents"] = [{"Key": k} for k in page]
        if len(keys) > self.page_size:
            result["NextContinuationToken"] = page[-1]
        return result

    def delete_objects(self, *, Bucket: str, Delete: dict) -> dict:
        keys = [obj["Key"] for obj in Delete["Objects"]]
        self.delete_calls.append(keys)
        for key in keys:
            self.objects.pop(key, None)
        return {"Deleted": [{"Key": k} for k in keys]}

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self.objects if k.startswith(prefix))


def make_zip(files: dict[str, bytes]) -> bytes:
    """Return the bytes of a zip archive containing files."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


def cache_record(
    *,
    id: int = 1,
    build: int = 231,
    timestamp: str | None = "2024-05-01T00:00:00Z",
    scope: str = "runescape",
    game: str = "oldschool",
    environment: str = "live",
    language: str = "en",
    size: int = 1024,
    builds: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return an OpenRS2-shaped cache record."""
    return {
        "id": id,
        "scope": scope,
        "game": game,
        "environment": environment,
        "language": language,
        "builds": [{"major": build, "minor": None}] if builds is None else builds,
        "timestamp": timestamp,
        "name": None,
        "description": None,
        "url": None,
        "sources": ["Jagex"],
        "valid_indexes": 21,
        "indexes": 21,
        "valid_groups": 1000,
        "groups": 1000,
        "valid_keys": 10,
        "keys": 10,
        "size": size,
        "blocks": 2000,
        "disk_store_valid": True,
    }


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo the root logger changes made by configure_logging."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def archive_url() -> str:
    return ARCHIVE


@pytest.fixture
def public_url() -> str:
    return PUBLIC


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    return cache_record


@pytest.fixture
def zip_bytes() -> Callable[[dict[str, bytes]], bytes]:
    return make_zip


@pytest.fixture
def upstream(fake_session: FakeSession, zip_bytes) -> Callable[..., FakeSession]:
    """Return a function that populates fake_session with an OpenRS2 listing."""

    def _setup(records: list[dict[str, Any]], files: dict[str, bytes] | None = None):
        fake_session.set_json(f"{ARCHIVE}/caches.json", records)
        archive = zip_bytes(files or {"cache/main_file_cache.dat2": b"\x00" * 32})
        for record in records:
            base = f"{ARCHIVE}/caches/{record['scope']}/{record['id']}"
            fake_session.set_bytes(f"{base}/disk.zip", archive)
            fake_session.set_json(f"{base}/keys.json", [{"group": 5, "key": "k5"}])
        return fake_session

    return _setup
