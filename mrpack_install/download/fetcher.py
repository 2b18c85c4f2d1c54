"""
HTTP 获取器

基于 aiohttp 的单次 GET 下载，返回完整响应体。
"""

import asyncio
from typing import Optional

import aiohttp
from loguru import logger

from mrpack_install.exceptions import DownloadNetworkError, DownloadStatusError


class HttpFetcher:
    """HTTP 获取器"""

    chunk_size = 8192

    def __init__(
        self,
        timeout: Optional[float] = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.timeout = timeout
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def fetch(self, url: str, expected_size: Optional[int] = None) -> bytes:
        """
        下载 URL 的完整内容

        Args:
            url: 下载地址
            expected_size: 清单声明的文件大小，响应没有 Content-Length 时用于计算进度

        Raises:
            DownloadStatusError: 响应状态码不是 200
            DownloadNetworkError: 连接失败或超时
        """
        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise DownloadStatusError(
                        f"HTTP {response.status}: {url}",
                        status=response.status,
                        context={"url": url, "status": response.status},
                    )

                total_size = response.content_length or expected_size or 0
                buffer = bytearray()
                last_percent = 0.0

                async for chunk in response.content.iter_chunked(self.chunk_size):
                    buffer.extend(chunk)
                    if total_size > 0:
                        percent = (len(buffer) / total_size) * 100
                        if percent - last_percent >= 5:
                            logger.debug(f"[进度] {url}: {percent:.1f}%")
                            last_percent = percent

                return bytes(buffer)
        except aiohttp.ClientError as e:
            raise DownloadNetworkError(
                f"请求失败: {url} ({e})", context={"url": url, "error": str(e)}
            )
        except asyncio.TimeoutError:
            raise DownloadNetworkError(
                f"请求超时: {url}", context={"url": url, "timeout": self.timeout}
            )

    async def close(self):
        """关闭获取器"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
