"""
mrpack-install 数据模型包

包含清单模型和配置模型定义。
"""

from mrpack_install.models.config import InstallConfig
from mrpack_install.models.manifest import EnvSupport, ModEntry, ModpackIndex
from mrpack_install.models.report import (
    EntryOutcome,
    InstallReport,
    OutcomeStatus,
    SkipReason,
)

__all__ = [
    # 配置模型
    "InstallConfig",
    # 清单模型
    "EnvSupport",
    "ModEntry",
    "ModpackIndex",
    # 结果模型
    "EntryOutcome",
    "InstallReport",
    "OutcomeStatus",
    "SkipReason",
]
