"""
mrpack-install 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息、进程退出码和 JSON 序列化。
"""

from typing import Any, Dict, Optional


class MrpackInstallError(Exception):
    """mrpack-install 基础异常类"""

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
            "exit_code": self.exit_code,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(MrpackInstallError):
    """配置相关错误"""

    exit_code = 2

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置文件解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class HomeDirectoryError(ConfigError):
    """无法确定用户主目录"""

    def _get_default_code(self) -> str:
        return "E103"


class ArchiveError(MrpackInstallError):
    """mrpack 归档相关错误"""

    exit_code = 3

    def _get_default_code(self) -> str:
        return "E200"


class ArchiveOpenError(ArchiveError):
    """无法打开归档文件"""

    def _get_default_code(self) -> str:
        return "E201"


class ArchiveFormatError(ArchiveError):
    """归档不是有效的 zip 文件"""

    def _get_default_code(self) -> str:
        return "E202"


class ManifestMissingError(ArchiveError):
    """归档中缺少 modrinth.index.json"""

    def _get_default_code(self) -> str:
        return "E203"


class ManifestDecodeError(ArchiveError):
    """modrinth.index.json 无法解码为文本"""

    def _get_default_code(self) -> str:
        return "E204"


class ManifestError(MrpackInstallError):
    """清单内容错误"""

    exit_code = 4

    def _get_default_code(self) -> str:
        return "E300"


class ManifestParseError(ManifestError):
    """清单不是合法的 JSON"""

    def _get_default_code(self) -> str:
        return "E301"


class ManifestFieldError(ManifestError):
    """清单条目缺少字段或字段类型错误"""

    def _get_default_code(self) -> str:
        return "E302"


class DownloadError(MrpackInstallError):
    """下载相关错误"""

    exit_code = 5

    def _get_default_code(self) -> str:
        return "E400"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E401"


class DownloadStatusError(DownloadNetworkError):
    """服务器返回了非 200 状态码"""

    def __init__(
        self, message: str, status: int, context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, context=context)
        self.status = status

    def _get_default_code(self) -> str:
        return "E402"


class InstallError(MrpackInstallError):
    """安装（写入文件）相关错误"""

    exit_code = 6

    def _get_default_code(self) -> str:
        return "E500"


class UnsafePathError(InstallError):
    """条目路径超出安装根目录"""

    def _get_default_code(self) -> str:
        return "E501"


class InstallWriteError(InstallError):
    """写入文件失败"""

    def _get_default_code(self) -> str:
        return "E502"


__all__ = [
    # 基础异常
    "MrpackInstallError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    "HomeDirectoryError",
    # 归档异常
    "ArchiveError",
    "ArchiveOpenError",
    "ArchiveFormatError",
    "ManifestMissingError",
    "ManifestDecodeError",
    # 清单异常
    "ManifestError",
    "ManifestParseError",
    "ManifestFieldError",
    # 下载异常
    "DownloadError",
    "DownloadNetworkError",
    "DownloadStatusError",
    # 安装异常
    "InstallError",
    "UnsafePathError",
    "InstallWriteError",
]
