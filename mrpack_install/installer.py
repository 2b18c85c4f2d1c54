"""
安装器

把校验通过的内容写入服务端目录，必要时创建父目录，已存在的文件直接覆盖。
"""

import os
from pathlib import Path
from typing import Union

import aiofiles

from mrpack_install.exceptions import InstallWriteError, UnsafePathError
from mrpack_install.models import ModEntry


class Installer:
    """安装器"""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(os.path.normpath(root))

    def resolve_target(self, relative: str) -> Path:
        """
        计算相对路径在安装根目录下的绝对位置

        Raises:
            UnsafePathError: 路径为空、为绝对路径或通过 .. 跳出根目录
        """
        if not relative or not relative.strip():
            raise UnsafePathError("目标路径为空", context={"path": relative})

        target = Path(os.path.normpath(self.root / relative))
        if target == self.root or os.path.commonpath(
            [str(self.root), str(target)]
        ) != str(self.root):
            raise UnsafePathError(
                f"路径 '{relative}' 超出了安装目录 {self.root}",
                context={"path": relative, "root": str(self.root)},
            )
        return target

    def target_path(self, entry: ModEntry) -> Path:
        return self.resolve_target(entry.path)

    async def _write(self, relative: str, data: bytes) -> Path:
        full_path = self.resolve_target(relative)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise InstallWriteError(
                f"写入文件 `{relative}` 失败: {e}",
                context={"path": relative, "full_path": str(full_path)},
            )
        return full_path

    async def install(self, entry: ModEntry, data: bytes) -> Path:
        """写入条目内容，返回写入的完整路径"""
        return await self._write(entry.path, data)

    async def write_override(self, relative: str, data: bytes) -> Path:
        """写入 overrides 中的文件"""
        return await self._write(relative, data)
