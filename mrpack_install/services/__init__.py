"""
mrpack-install 服务层

包含 mrpack 读取、清单解析和条目筛选。
"""

from mrpack_install.services.mrpack_reader import (
    MANIFEST_NAME,
    MrpackArchive,
    extract_manifest,
    parse_index,
    parse_manifest,
    read_index,
)
from mrpack_install.services.selection import select_server_entries

__all__ = [
    "MANIFEST_NAME",
    "MrpackArchive",
    "extract_manifest",
    "parse_index",
    "parse_manifest",
    "read_index",
    "select_server_entries",
]
