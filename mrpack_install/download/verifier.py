"""
文件校验器

实现 SHA512 计算、摘要比对和已存在文件的完整性检查。
"""

import hashlib
import os
from typing import Optional

import aiofiles


class FileVerifier:
    """文件校验器"""

    @staticmethod
    def sha512(data: bytes) -> str:
        """计算字节串的 SHA512 十六进制摘要"""
        return hashlib.sha512(data).hexdigest()

    @staticmethod
    async def calc_sha512(file_path: str) -> Optional[str]:
        """
        计算文件的 SHA512 值

        Args:
            file_path: 文件路径

        Returns:
            SHA512 哈希值或 None（如果文件不存在或不可读）
        """
        if not os.path.isfile(file_path):
            return None

        sha512 = hashlib.sha512()
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    data = await f.read(65536)
                    if not data:
                        break
                    sha512.update(data)
            return sha512.hexdigest()
        except OSError:
            return None

    @staticmethod
    async def is_valid(file_path: str, expected_sha512: str) -> bool:
        """检查文件是否存在且 SHA512 校验通过"""
        current = await FileVerifier.calc_sha512(file_path)
        if current is None:
            return False
        return current == expected_sha512.strip().lower()
