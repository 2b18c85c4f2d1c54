"""
mrpack-install

读取 .mrpack 整合包清单，校验并安装服务端所需的文件。
"""

__version__ = "0.1.0"

from mrpack_install.models import InstallConfig, InstallReport, ModEntry
from mrpack_install.orchestrator import InstallOrchestrator

__all__ = [
    "__version__",
    "InstallConfig",
    "InstallOrchestrator",
    "InstallReport",
    "ModEntry",
]
