"""
Shared fixtures and helpers for the mrpack-install test suite.
"""

import asyncio
import hashlib
import json
import zipfile

import pytest
from loguru import logger

from mrpack_install.exceptions import DownloadNetworkError, DownloadStatusError
from mrpack_install.models import EnvSupport, ModEntry


def sha512(data: bytes) -> str:
    return hashlib.sha512(data).hexdigest()


def file_entry(path, data, server="required", client="required", url=None):
    """Build one raw `files[]` element of modrinth.index.json."""
    return {
        "path": path,
        "hashes": {"sha1": hashlib.sha1(data).hexdigest(), "sha512": sha512(data)},
        "env": {"client": client, "server": server},
        "downloads": [url or f"https://cdn.example.com/{path}"],
        "fileSize": len(data),
    }


def make_index(files, **extra):
    index = {
        "formatVersion": 1,
        "game": "minecraft",
        "versionId": "1.0.0",
        "name": "Test Pack",
        "dependencies": {"minecraft": "1.20.1", "fabric-loader": "0.15.11"},
        "files": files,
    }
    index.update(extra)
    return index


def make_mrpack(path, index, members=None):
    """Write a .mrpack at `path`; `index` may be a dict, raw text/bytes or None."""
    with zipfile.ZipFile(path, "w") as zf:
        if index is not None:
            if isinstance(index, dict):
                index = json.dumps(index)
            zf.writestr("modrinth.index.json", index)
        for name, data in (members or {}).items():
            zf.writestr(name, data)
    return path


def mod_entry(path="mods/a.jar", data=b"a", server=EnvSupport.REQUIRED, url=None):
    return ModEntry(
        path=path,
        sha512=sha512(data),
        url=url or f"https://cdn.example.com/{path}",
        server=server,
    )


class FakeFetcher:
    """In-memory stand-in for HttpFetcher."""

    def __init__(self, payloads=None, failures=(), delays=None, statuses=None):
        self.payloads = dict(payloads or {})
        self.failures = set(failures)
        self.delays = dict(delays or {})
        self.statuses = dict(statuses or {})
        self.requests = []
        self.expected_sizes = {}
        self.active = 0
        self.peak_active = 0
        self.closed = False

    async def fetch(self, url, expected_size=None):
        self.requests.append(url)
        self.expected_sizes[url] = expected_size
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            if url in self.delays:
                await asyncio.sleep(self.delays[url])
            if url in self.failures:
                raise DownloadNetworkError(
                    f"connection reset: {url}", context={"url": url}
                )
            if url in self.statuses:
                status = self.statuses[url]
                raise DownloadStatusError(
                    f"HTTP {status}: {url}", status=status, context={"url": url}
                )
            return self.payloads[url]
        finally:
            self.active -= 1

    async def close(self):
        self.closed = True


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def server_dir(tmp_path):
    path = tmp_path / "server"
    path.mkdir()
    return path


@pytest.fixture
def log_records():
    """Collect (level, message) pairs emitted during the test."""
    records = []
    handler_id = logger.add(
        lambda message: records.append(
            (message.record["level"].name, message.record["message"])
        ),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)
