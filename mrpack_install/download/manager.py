"""
下载管理器

下载单个条目并以 SHA512 校验，网络失败时按配置重试。
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

from loguru import logger

from mrpack_install.download.verifier import FileVerifier
from mrpack_install.exceptions import DownloadNetworkError, DownloadStatusError
from mrpack_install.models import ModEntry, SkipReason


class Fetcher(Protocol):
    async def fetch(self, url: str, expected_size: Optional[int] = None) -> bytes: ...

    async def close(self) -> None: ...


@dataclass
class DownloadResult:
    """下载结果：成功时携带内容，被跳过时携带原因"""

    entry: ModEntry
    data: Optional[bytes] = None
    skip_reason: Optional[SkipReason] = None
    actual_sha512: Optional[str] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.skip_reason is None


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        fetcher: Fetcher,
        max_retries: int = 0,
        retry_delay: float = 1.0,
    ):
        self.fetcher = fetcher
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.verifier = FileVerifier()
        self.bytes_downloaded = 0

    async def _fetch_with_retry(self, entry: ModEntry) -> bytes:
        attempt = 0
        while True:
            try:
                return await self.fetcher.fetch(entry.url, entry.file_size)
            except DownloadNetworkError as e:
                if attempt >= self.max_retries:
                    logger.debug(f"[错误] 下载 '{entry.path}' 失败: {e.message}")
                    if isinstance(e, DownloadStatusError):
                        raise
                    raise DownloadNetworkError(
                        f"下载 '{entry.path}' 失败: {e.message}",
                        context={"path": entry.path, "url": entry.url, **e.context},
                    )
                delay = self.retry_delay * (2**attempt)
                logger.warning(
                    f"[重试] 下载 '{entry.filename}' 失败 (第 {attempt + 1} 次): "
                    f"{e.message}. {delay:.1f}s 后重试..."
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def download_and_verify(self, entry: ModEntry) -> DownloadResult:
        """
        下载条目并校验 SHA512

        Returns:
            DownloadResult；服务器返回错误状态码时 skip_reason 为 HTTP_STATUS，
            摘要不匹配时为 HASH_MISMATCH

        Raises:
            DownloadNetworkError: 重试耗尽后仍无法连接或读取超时
        """
        logger.info(f"[开始] 下载: {entry.filename}")
        try:
            data = await self._fetch_with_retry(entry)
        except DownloadStatusError as e:
            logger.warning(
                f"    服务器返回 HTTP {e.status}: {entry.path}   跳过该文件"
            )
            return DownloadResult(
                entry=entry,
                skip_reason=SkipReason.HTTP_STATUS,
                detail=f"HTTP {e.status}",
            )
        self.bytes_downloaded += len(data)

        actual = self.verifier.sha512(data)
        if actual != entry.sha512.lower():
            logger.warning(
                f"    下载文件的哈希与整合包声明不一致: {entry.path}   跳过该文件"
            )
            logger.debug(f"    预期 {entry.sha512}，实际 {actual}")
            return DownloadResult(
                entry=entry,
                skip_reason=SkipReason.HASH_MISMATCH,
                actual_sha512=actual,
                detail=f"SHA512 不匹配 (实际 {actual})",
            )

        return DownloadResult(entry=entry, data=data, actual_sha512=actual)
