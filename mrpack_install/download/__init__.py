"""
mrpack-install 下载层

包含 HTTP 获取、下载管理、文件校验等功能。
"""

from mrpack_install.download.fetcher import HttpFetcher
from mrpack_install.download.manager import DownloadManager, DownloadResult
from mrpack_install.download.verifier import FileVerifier

__all__ = [
    "HttpFetcher",
    "DownloadManager",
    "DownloadResult",
    "FileVerifier",
]
