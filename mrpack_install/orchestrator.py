"""
主协调器

串联清单读取、条目筛选、下载校验和写入，实现完整的服务端安装流程。
"""

import asyncio
from collections import deque
from pathlib import Path
from typing import Callable, Deque, List, Optional, Tuple, Union

import click
from loguru import logger

from mrpack_install.download import (
    DownloadManager,
    DownloadResult,
    FileVerifier,
    HttpFetcher,
)
from mrpack_install.download.manager import Fetcher
from mrpack_install.exceptions import (
    DownloadNetworkError,
    InstallWriteError,
    MrpackInstallError,
    UnsafePathError,
)
from mrpack_install.installer import Installer
from mrpack_install.models import (
    InstallConfig,
    InstallReport,
    ModEntry,
    ModpackIndex,
    OutcomeStatus,
    SkipReason,
)
from mrpack_install.services import (
    MANIFEST_NAME,
    MrpackArchive,
    read_index,
    select_server_entries,
)

DownloadOutcome = Tuple[Optional[DownloadResult], Optional[DownloadNetworkError]]


def prompt_confirm(message: str) -> bool:
    """在终端询问用户，只接受 y/n"""
    return click.confirm(message, default=None)


class InstallOrchestrator:
    """mrpack 服务端安装协调器"""

    def __init__(
        self,
        archive_path: Union[str, Path],
        server_dir: Union[str, Path],
        config: Optional[InstallConfig] = None,
        fetcher: Optional[Fetcher] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.archive_path = Path(archive_path)
        self.server_dir = Path(server_dir)
        self.config = config or InstallConfig()
        self.fetcher = fetcher or HttpFetcher(timeout=self.config.timeout)
        self.download_manager = DownloadManager(
            self.fetcher,
            max_retries=self.config.max_retries,
            retry_delay=self.config.retry_delay,
        )
        self.installer = Installer(self.server_dir)
        self.confirm = confirm or prompt_confirm
        self.report = InstallReport()

    async def run(self) -> Optional[InstallReport]:
        """
        运行完整的安装流程

        Returns:
            InstallReport；用户取消时返回 None
        """
        try:
            index = self._load_index()
            entries = select_server_entries(index.files)
            logger.info(
                f"服务端需要 {len(entries)} 个文件 (清单共 {len(index.files)} 个)"
            )

            if not self.config.assume_yes and not self.confirm(
                f"\n是否在 {self.server_dir} 安装 {len(entries)} 个模组?"
            ):
                logger.info("已取消安装")
                return None

            logger.info("开始下载:")
            await self._install_entries(entries)

            if self.config.overrides:
                await self._apply_overrides()

            self.report.bytes_downloaded = self.download_manager.bytes_downloaded
            self._log_summary()
            logger.success("完成!")
            return self.report
        except MrpackInstallError as e:
            logger.error(f"安装失败: {e}")
            raise
        finally:
            await self.fetcher.close()

    def _load_index(self) -> ModpackIndex:
        logger.info(f"正在打开 mrpack: {self.archive_path}")
        logger.info(f"正在解析 `{MANIFEST_NAME}`")
        index = read_index(self.archive_path)

        versions = ", ".join(f"{k} {v}" for k, v in index.dependencies.items())
        logger.info(
            f"整合包: {index.name} {index.version_id}".rstrip()
            + (f" ({versions})" if versions else "")
        )
        return index

    def _recover(
        self, entry: ModEntry, error: MrpackInstallError, reason: SkipReason
    ):
        """keep_going 时把网络/写入错误降级为跳过，否则继续抛出"""
        if not self.config.keep_going:
            raise error
        logger.warning(f"    {error.message}   跳过该文件")
        self.report.add(entry, OutcomeStatus.SKIPPED, reason, error.message)

    async def _precheck(self, entries: List[ModEntry]) -> List[ModEntry]:
        """过滤掉路径不安全的条目，以及（可选）已存在且校验通过的条目"""
        pending = []
        for entry in entries:
            try:
                target = self.installer.target_path(entry)
            except UnsafePathError as e:
                logger.warning(f"    {e.message}   跳过该文件")
                self.report.add(
                    entry, OutcomeStatus.SKIPPED, SkipReason.UNSAFE_PATH, e.message
                )
                continue

            if self.config.skip_existing and await FileVerifier.is_valid(
                str(target), entry.sha512
            ):
                logger.info(f"    [跳过] `{entry.path}` 已存在且校验通过")
                self.report.add(entry, OutcomeStatus.UNCHANGED)
                continue

            pending.append(entry)
        return pending

    async def _download(self, entry: ModEntry) -> DownloadOutcome:
        try:
            return await self.download_manager.download_and_verify(entry), None
        except DownloadNetworkError as e:
            return None, e

    async def _install_entries(self, entries: List[ModEntry]):
        pending = iter(await self._precheck(entries))
        # 已调度但尚未安装的下载最多 max_concurrent 个，内存中不会堆积更多响应体
        window: Deque[Tuple[ModEntry, asyncio.Future]] = deque()

        def fill():
            while len(window) < self.config.max_concurrent:
                entry = next(pending, None)
                if entry is None:
                    return
                window.append((entry, asyncio.ensure_future(self._download(entry))))

        try:
            fill()
            while window:
                entry, download = window.popleft()
                result, error = await download
                await self._handle_download(entry, result, error)
                fill()
        finally:
            futures = [download for _, download in window]
            for download in futures:
                download.cancel()
            if futures:
                await asyncio.gather(*futures, return_exceptions=True)

    async def _handle_download(
        self,
        entry: ModEntry,
        result: Optional[DownloadResult],
        error: Optional[DownloadNetworkError],
    ):
        if error is not None:
            self._recover(entry, error, SkipReason.NETWORK_ERROR)
            return

        if not result.ok:
            self.report.add(
                entry, OutcomeStatus.SKIPPED, result.skip_reason, result.detail
            )
            return

        try:
            await self.installer.install(entry, result.data)
        except InstallWriteError as e:
            self._recover(entry, e, SkipReason.WRITE_ERROR)
            return

        self.report.add(entry, OutcomeStatus.INSTALLED)
        logger.success(f"    成功下载模组 `{entry.path}`")

    async def _apply_overrides(self):
        """把 overrides/ 与 server-overrides/ 中的文件复制到服务端目录"""
        logger.info("正在应用 overrides...")
        count = 0
        with MrpackArchive(self.archive_path) as archive:
            for relative, data in archive.iter_overrides():
                try:
                    await self.installer.write_override(relative, data)
                except UnsafePathError as e:
                    logger.warning(f"    {e.message}   跳过该文件")
                    continue
                except InstallWriteError as e:
                    if not self.config.keep_going:
                        raise
                    logger.warning(f"    {e.message}   跳过该文件")
                    continue
                count += 1
                logger.debug(f"    [覆盖] {relative}")
        logger.success(f"已应用 {count} 个 overrides 文件")

    def _log_summary(self):
        logger.info(
            f"安装完成: {len(self.report.installed)} 成功, "
            f"{len(self.report.skipped)} 跳过, {len(self.report.unchanged)} 未变化, "
            f"共下载 {self.report.bytes_downloaded / (1024 * 1024):.2f} MB"
        )
        for outcome in self.report.skipped:
            logger.warning(
                f"    已跳过 `{outcome.entry.path}` ({outcome.reason.value}): {outcome.detail}"
            )
