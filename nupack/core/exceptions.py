"""统一异常体系

所有业务异常继承 NupackError，替代散落的 ValueError / RuntimeError。
Web 层可据此自动映射 HTTP 状态码，CLI 层可据此输出友好提示。
"""

from __future__ import annotations


class NupackError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(NupackError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ParseError(NupackError):
    """文档或版本字符串格式错误，不可恢复"""

    code = "PARSE_ERROR"


class InvalidVersionError(ParseError):
    """版本号或版本范围无法解析"""

    code = "INVALID_VERSION"


class ValidationError(NupackError):
    """输入数据校验失败

    details 汇总了全部违规项，而非仅第一条。
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class VersionResolutionError(NupackError):
    """找不到匹配版本，或查询时包源不可达"""

    code = "VERSION_RESOLUTION_ERROR"


class NotSupportedError(NupackError):
    """不支持的输入形式（如远程 .nupkg 路径）"""

    code = "NOT_SUPPORTED"


class SourceUnavailableError(NupackError):
    """包源与本地缓存均不可用"""

    code = "SOURCE_UNAVAILABLE"
