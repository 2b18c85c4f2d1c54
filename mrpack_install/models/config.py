"""
配置模型

安装过程的可调参数。所有默认值都对应最保守的行为：
顺序下载、不重试、遇到网络或写入错误立即终止。
"""

from dataclasses import dataclass, fields
from typing import Any, Dict

from mrpack_install.exceptions import ConfigValidationError


@dataclass
class InstallConfig:
    """安装配置"""

    max_concurrent: int = 1
    max_retries: int = 0
    retry_delay: float = 1.0
    timeout: float = 30.0
    keep_going: bool = False
    overrides: bool = False
    skip_existing: bool = False
    assume_yes: bool = False

    def __post_init__(self):
        self._validate()

    def _validate(self):
        for name in ("max_concurrent", "max_retries"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigValidationError(
                    f"{name} 必须为整数", context={name: value}
                )
        if self.max_concurrent < 1:
            raise ConfigValidationError(
                "max_concurrent 必须为不小于 1 的整数",
                context={"max_concurrent": self.max_concurrent},
            )
        if self.max_retries < 0:
            raise ConfigValidationError(
                "max_retries 必须为非负整数",
                context={"max_retries": self.max_retries},
            )
        for name in ("retry_delay", "timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigValidationError(
                    f"{name} 必须为数字", context={name: value}
                )
            if value < 0 or (name == "timeout" and value == 0):
                raise ConfigValidationError(
                    f"{name} 取值无效: {value}", context={name: value}
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallConfig":
        """从字典创建配置，忽略值为 None 的键"""
        if not isinstance(data, dict):
            raise ConfigValidationError("配置内容必须是键值表")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"未知的配置项: {', '.join(unknown)}", context={"keys": unknown}
            )

        for name in ("keep_going", "overrides", "skip_existing", "assume_yes"):
            value = data.get(name)
            if value is not None and not isinstance(value, bool):
                raise ConfigValidationError(
                    f"{name} 必须为布尔值", context={name: value}
                )

        return cls(**{k: v for k, v in data.items() if v is not None})
