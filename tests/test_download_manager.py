"""
Tests for DownloadManager: fetch, digest gate and retries.
"""

import pytest

from mrpack_install.download import DownloadManager
from mrpack_install.exceptions import DownloadNetworkError
from mrpack_install.models import EnvSupport, ModEntry, SkipReason
from tests.conftest import FakeFetcher, mod_entry, sha512


class FlakyFetcher(FakeFetcher):
    """Fails the first `failures_before_success` requests."""

    def __init__(self, payloads, failures_before_success):
        super().__init__(payloads)
        self.remaining_failures = failures_before_success

    async def fetch(self, url, expected_size=None):
        self.requests.append(url)
        if self.remaining_failures:
            self.remaining_failures -= 1
            raise DownloadNetworkError("connection reset", context={"url": url})
        return self.payloads[url]


@pytest.mark.asyncio
async def test_matching_digest_returns_bytes():
    entry = mod_entry("mods/a.jar", b"jar-bytes")
    manager = DownloadManager(FakeFetcher({entry.url: b"jar-bytes"}))

    result = await manager.download_and_verify(entry)

    assert result.ok
    assert result.data == b"jar-bytes"
    assert result.actual_sha512 == sha512(b"jar-bytes")
    assert manager.bytes_downloaded == len(b"jar-bytes")


@pytest.mark.asyncio
async def test_mismatch_is_skip_not_error(log_messages):
    entry = mod_entry("mods/a.jar", b"expected")
    manager = DownloadManager(FakeFetcher({entry.url: b"tampered"}))

    result = await manager.download_and_verify(entry)

    assert not result.ok
    assert result.data is None
    assert result.skip_reason is SkipReason.HASH_MISMATCH
    assert any("mods/a.jar" in m for m in log_messages)


@pytest.mark.asyncio
async def test_network_error_without_retries_is_raised():
    entry = mod_entry()
    fetcher = FakeFetcher(failures=[entry.url])
    manager = DownloadManager(fetcher)

    with pytest.raises(DownloadNetworkError) as excinfo:
        await manager.download_and_verify(entry)

    assert len(fetcher.requests) == 1
    assert excinfo.value.context["path"] == entry.path
    assert excinfo.value.exit_code == 5


@pytest.mark.asyncio
async def test_retries_recover_transient_failures():
    entry = mod_entry("mods/a.jar", b"a")
    fetcher = FlakyFetcher({entry.url: b"a"}, failures_before_success=2)
    manager = DownloadManager(fetcher, max_retries=2, retry_delay=0)

    result = await manager.download_and_verify(entry)

    assert result.ok
    assert len(fetcher.requests) == 3


@pytest.mark.asyncio
async def test_retries_exhausted():
    entry = mod_entry("mods/a.jar", b"a")
    fetcher = FlakyFetcher({entry.url: b"a"}, failures_before_success=5)
    manager = DownloadManager(fetcher, max_retries=1, retry_delay=0)

    with pytest.raises(DownloadNetworkError):
        await manager.download_and_verify(entry)
    assert len(fetcher.requests) == 2


@pytest.mark.asyncio
async def test_digest_comparison_is_case_insensitive():
    entry = ModEntry(
        path="mods/a.jar",
        sha512=sha512(b"a").upper(),
        url="https://cdn.example.com/mods/a.jar",
        server=EnvSupport.REQUIRED,
    )
    manager = DownloadManager(FakeFetcher({entry.url: b"a"}))

    result = await manager.download_and_verify(entry)

    assert result.ok


@pytest.mark.asyncio
async def test_http_status_is_skip_not_error(log_messages):
    entry = mod_entry("mods/gone.jar", b"gone")
    manager = DownloadManager(FakeFetcher(statuses={entry.url: 404}))

    result = await manager.download_and_verify(entry)

    assert not result.ok
    assert result.data is None
    assert result.skip_reason is SkipReason.HTTP_STATUS
    assert result.detail == "HTTP 404"
    assert manager.bytes_downloaded == 0
    assert any("404" in m and "mods/gone.jar" in m for m in log_messages)


@pytest.mark.asyncio
async def test_http_status_is_retried_before_skipping():
    entry = mod_entry("mods/gone.jar", b"gone")
    fetcher = FakeFetcher(statuses={entry.url: 503})
    manager = DownloadManager(fetcher, max_retries=2, retry_delay=0)

    result = await manager.download_and_verify(entry)

    assert result.skip_reason is SkipReason.HTTP_STATUS
    assert len(fetcher.requests) == 3


@pytest.mark.asyncio
async def test_declared_file_size_is_passed_to_fetcher():
    entry = ModEntry(
        path="mods/a.jar",
        sha512=sha512(b"a"),
        url="https://cdn.example.com/mods/a.jar",
        server=EnvSupport.REQUIRED,
        file_size=1,
    )
    fetcher = FakeFetcher({entry.url: b"a"})

    await DownloadManager(fetcher).download_and_verify(entry)

    assert fetcher.expected_sizes == {entry.url: 1}


@pytest.mark.asyncio
async def test_bytes_downloaded_counts_every_fetched_body():
    good = mod_entry("mods/a.jar", b"aaaa")
    bad = mod_entry("mods/b.jar", b"expected")
    manager = DownloadManager(
        FakeFetcher({good.url: b"aaaa", bad.url: b"tampered"})
    )

    await manager.download_and_verify(good)
    await manager.download_and_verify(bad)

    assert manager.bytes_downloaded == len(b"aaaa") + len(b"tampered")


@pytest.mark.asyncio
async def test_final_network_failure_logged_below_warning(log_records):
    entry = mod_entry()
    manager = DownloadManager(FakeFetcher(failures=[entry.url]))

    with pytest.raises(DownloadNetworkError):
        await manager.download_and_verify(entry)

    assert not [
        message
        for level, message in log_records
        if level in ("WARNING", "ERROR") and entry.path in message
    ]
