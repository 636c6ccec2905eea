"""核心数据模型

解析流水线在各阶段之间传递的值对象集中定义于此。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from semantic_version import Version


class InputKind(Enum):
    """用户输入的标识符类别"""

    BARE_NAME = "bare-name"
    LOCK_FILE = "lock-file"
    ARCHIVE_PATH = "archive-path"


@dataclass(frozen=True)
class PackageIdentity:
    """包标识 (id, version)，创建后不可变"""

    id: str
    version: Version

    def __str__(self) -> str:
        return f"{self.id} {self.version}"

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "version": str(self.version)}


@dataclass(frozen=True)
class ResolutionInput:
    """未经分类的原始安装请求"""

    identifier: str
    version: str = ""
    source: str = ""
    include_prerelease: bool = False
    frameworks: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolutionContext:
    """在流水线各阶段间传递的解析上下文

    各阶段通过 dataclasses.replace 派生新上下文，不原地修改。
    """

    source: str
    include_prerelease: bool = False
    frameworks: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass
class ResolutionResult:
    """一次解析的输出"""

    identities: list[PackageIdentity]
    context: ResolutionContext
    errors: list[str] = field(default_factory=list)

    @property
    def source(self) -> str:
        return self.context.source

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.context.warnings

    def to_dict(self) -> dict:
        return {
            "identities": [i.to_dict() for i in self.identities],
            "source": self.context.source,
            "warnings": list(self.context.warnings),
            "errors": list(self.errors),
        }


@dataclass
class PackageSource:
    """已配置的包源"""

    name: str
    url: str
    enabled: bool = True

    @property
    def is_http(self) -> bool:
        from nupack.utils.net import is_http_source
        return is_http_source(self.url)


@dataclass(frozen=True)
class LockFileEntry:
    """packages.config 中的一条原始记录，字段均为未经校验的字符串"""

    id: str
    version: str
    target_framework: str = ""
    allowed_versions: str = ""
