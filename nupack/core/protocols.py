"""协作方协议定义

解析流水线依赖的外部协作方（包源仓库、归档读取、lock 文件解析、包源提供者）
在此以 Protocol 声明，实现类通过构造函数注入。

使用 typing.Protocol 而非 ABC，测试替身与第三方实现无需继承即可满足协议。
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from semantic_version import Version

from nupack.core.models import LockFileEntry, PackageIdentity, PackageSource


# =========================================================================
# 包源仓库协议
# =========================================================================

class PackageRepository(Protocol):
    """包源仓库协议

    找不到包时 resolve_package 抛 VersionResolutionError；
    不可达时抛 OSError / ConnectionError，由调用方决定是否降级。
    """

    source: str

    def find_latest_version(
        self,
        package_id: str,
        frameworks: Sequence[str],
        include_prerelease: bool,
    ) -> Version | None:
        """返回满足目标框架的最新版本，无匹配时返回 None"""
        ...

    def resolve_package(
        self, identity: PackageIdentity, include_prerelease: bool,
    ) -> PackageIdentity:
        """将请求的标识规范化为仓库中实际存在的标识（如 id 大小写）"""
        ...


# =========================================================================
# 归档 / lock 文件读取协议
# =========================================================================

class ArchiveReader(Protocol):
    """.nupkg 归档读取协议"""

    def read_identity(self, path: Path) -> PackageIdentity:
        """读取归档声明的 id 与 version，无法读取时抛 ParseError"""
        ...


class LockFileParser(Protocol):
    """packages.config 解析协议"""

    def parse(self, content: str | bytes) -> list[LockFileEntry]:
        """按文件顺序返回原始记录，文档损坏时抛 ParseError"""
        ...


# =========================================================================
# 包源配置协议
# =========================================================================

class SourceProvider(Protocol):
    """已配置包源的提供者"""

    def enabled_sources(self) -> list[PackageSource]:
        ...

    def active_source(self) -> PackageSource | None:
        ...


# =========================================================================
# 包元数据协议
# =========================================================================

class PackageMetadata(Protocol):
    """Manifest.create 可接受的元数据对象（字典同样可用）"""

    id: str
    version: Any
    title: str | None
    authors: Iterable[str] | None
    owners: Iterable[str] | None
    description: str | None
    summary: str | None
    language: str | None
    tags: str | None
    license_url: str | None
    project_url: str | None
    icon_url: str | None
    require_license_acceptance: bool
    dependencies: Iterable[Any] | None
