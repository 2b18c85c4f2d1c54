"""
条目筛选

只保留服务端必需 (env.server == "required") 的条目。
"""

from typing import Iterable, List

from mrpack_install.models import EnvSupport, ModEntry


def is_server_required(entry: ModEntry) -> bool:
    return entry.server is EnvSupport.REQUIRED


def select_server_entries(entries: Iterable[ModEntry]) -> List[ModEntry]:
    """按原顺序返回服务端必需的条目"""
    return [entry for entry in entries if is_server_required(entry)]
