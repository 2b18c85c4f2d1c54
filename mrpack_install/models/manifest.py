"""
清单数据模型

定义 modrinth.index.json 中的文件条目与整合包索引。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class EnvSupport(Enum):
    """条目在某一运行环境（客户端/服务端）中的需求程度"""

    REQUIRED = "required"
    OPTIONAL = "optional"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, value: str) -> Optional["EnvSupport"]:
        """将清单中的字符串映射为枚举，未知取值返回 None"""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class ModEntry:
    """
    清单中声明的单个文件。

    path 为相对于安装根目录的目标路径，sha512 已统一为小写。
    file_size 来自清单的 fileSize，响应缺少 Content-Length 时用于计算下载进度。
    """

    path: str
    sha512: str
    url: str
    server: EnvSupport
    file_size: Optional[int] = None

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass
class ModpackIndex:
    """整合包索引 (modrinth.index.json)"""

    name: str = "Unknown Pack"
    version_id: str = ""
    dependencies: Dict[str, str] = field(default_factory=dict)
    files: List[ModEntry] = field(default_factory=list)
