"""
路径解析

把命令行传入的路径（~ 开头、相对路径、绝对路径）统一转换为绝对路径。
"""

import os
from pathlib import Path

from mrpack_install.exceptions import HomeDirectoryError


def resolve_path(path: str) -> Path:
    """
    解析用户提供的路径

    - ``~`` 开头：替换为用户主目录
    - 绝对路径：原样返回
    - 其他：相对于当前工作目录，去掉开头的 ``./``

    Raises:
        HomeDirectoryError: 无法确定用户主目录
    """
    if path.startswith("~"):
        try:
            home = Path.home()
        except (RuntimeError, KeyError) as e:
            raise HomeDirectoryError(
                f"无法确定用户主目录，不能解析路径 '{path}'",
                context={"path": path, "error": str(e)},
            )
        # "~/x" 的剩余部分不能带前导分隔符，否则 join 会变成绝对路径
        remainder = path[1:].lstrip("/" + os.sep)
        return home / remainder if remainder else home

    if os.path.isabs(path):
        return Path(path)

    while path.startswith("./"):
        path = path[2:]
    return Path.cwd() / path
