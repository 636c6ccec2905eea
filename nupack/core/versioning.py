"""版本解析

职责:
- 解析用户输入的版本号（严格 SemVer 与 1.0 / 1.0.0.0 等 NuGet 写法）
- 解析依赖版本范围（区间记法）
- 未指定版本时向包源查询最新匹配版本

SemVer 部分的优先级委托 semantic_version.Version，第四段 revision 由 NuGetVersion 补充。
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from semantic_version import Version

from nupack.core.exceptions import InvalidVersionError, VersionResolutionError

if TYPE_CHECKING:
    from nupack.core.protocols import PackageRepository

logger = logging.getLogger(__name__)

# 1 ~ 4 段数字 + 可选预发布标签 / 构建元数据
_NUGET_RE = re.compile(
    r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"
    r"(-[0-9A-Za-z][0-9A-Za-z.-]*)?(\+[0-9A-Za-z.-]+)?$"
)


def _sort_key(version: Version) -> tuple:
    """(major, minor, patch, revision, 预发布)，不含构建元数据"""
    major, minor, patch, prerelease = version.precedence_key[:4]
    return (major, minor, patch, getattr(version, "revision", 0), prerelease)


class NuGetVersion(Version):
    """带第四段 revision 的版本号

    比较顺序: major.minor.patch.revision，再按预发布标签；构建元数据不参与比较。
    revision 为 0 时与同值的三段版本相等，例如 1.0.0.0 == 1.0.0。
    """

    def __init__(self, version_string: str, revision: int = 0) -> None:
        super().__init__(version_string)
        self.revision = revision

    def __str__(self) -> str:
        if not self.revision:
            return super().__str__()
        text = f"{self.major}.{self.minor}.{self.patch}.{self.revision}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.revision, self.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _sort_key(self) == _sort_key(other)

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _sort_key(self) != _sort_key(other)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _sort_key(self) < _sort_key(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _sort_key(self) <= _sort_key(other)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _sort_key(self) > _sort_key(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _sort_key(self) >= _sort_key(other)


def parse_version(text: str | None) -> NuGetVersion:
    """解析并规范化版本号

    缺省段补 0，各段去前导零，第四段 revision 单独保存。

    Raises:
        InvalidVersionError: 空值或格式错误
    """
    value = (text or "").strip()
    if not value:
        raise InvalidVersionError("版本号不能为空")
    m = _NUGET_RE.match(value)
    if not m:
        raise InvalidVersionError(f"无效的版本号: '{value}'")
    major, minor, patch, revision, prerelease, build = m.groups()
    core = f"{int(major)}.{int(minor or 0)}.{int(patch or 0)}"
    try:
        return NuGetVersion(core + (prerelease or "") + (build or ""), int(revision or 0))
    except ValueError as e:
        raise InvalidVersionError(f"无效的版本号: '{value}' ({e})") from e


def is_prerelease(version: Version) -> bool:
    return bool(version.prerelease)


@dataclass(frozen=True)
class VersionSpec:
    """版本范围

    记法:
        1.0        -> 1.0 <= x
        [1.0]      -> x == 1.0
        (,1.0]     -> x <= 1.0
        [1.0,2.0)  -> 1.0 <= x < 2.0
    """

    min_version: Version | None = None
    max_version: Version | None = None
    min_inclusive: bool = True
    max_inclusive: bool = False

    def contains(self, version: Version) -> bool:
        if self.min_version is not None:
            if version < self.min_version:
                return False
            if not self.min_inclusive and version == self.min_version:
                return False
        if self.max_version is not None:
            if version > self.max_version:
                return False
            if not self.max_inclusive and version == self.max_version:
                return False
        return True

    def __str__(self) -> str:
        if self.min_version is not None and self.max_version is None and self.min_inclusive:
            return str(self.min_version)
        if (
            self.min_version is not None
            and self.min_version == self.max_version
            and self.min_inclusive and self.max_inclusive
        ):
            return f"[{self.min_version}]"
        low = "[" if self.min_inclusive else "("
        high = "]" if self.max_inclusive else ")"
        lo = "" if self.min_version is None else str(self.min_version)
        hi = "" if self.max_version is None else str(self.max_version)
        return f"{low}{lo},{hi}{high}"


def parse_version_spec(text: str | None) -> VersionSpec:
    """解析版本范围字符串

    Raises:
        InvalidVersionError: 范围格式错误
    """
    value = (text or "").strip()
    if not value:
        raise InvalidVersionError("版本范围不能为空")

    if value[0] not in "[(":
        # 单个版本号即最低版本（含）
        return VersionSpec(min_version=parse_version(value), min_inclusive=True)

    if len(value) < 3 or value[-1] not in "])":
        raise InvalidVersionError(f"无效的版本范围: '{value}'")

    min_inclusive = value[0] == "["
    max_inclusive = value[-1] == "]"
    parts = value[1:-1].split(",")
    if len(parts) > 2 or all(not p.strip() for p in parts):
        raise InvalidVersionError(f"无效的版本范围: '{value}'")

    if len(parts) == 1:
        # [1.0] 精确版本，必须两端闭合
        if not (min_inclusive and max_inclusive):
            raise InvalidVersionError(f"精确版本必须使用方括号: '{value}'")
        exact = parse_version(parts[0])
        return VersionSpec(exact, exact, True, True)

    low, high = (p.strip() for p in parts)
    min_version = parse_version(low) if low else None
    max_version = parse_version(high) if high else None
    if min_version is not None and max_version is not None:
        if max_version < min_version or (
            max_version == min_version and not (min_inclusive and max_inclusive)
        ):
            raise InvalidVersionError(f"版本范围上界小于下界: '{value}'")
    return VersionSpec(min_version, max_version, min_inclusive, max_inclusive)


class VersionResolver:
    """版本解析器 — 显式版本直接解析，否则向包源查询最新版本"""

    def __init__(self, repository: PackageRepository) -> None:
        self.repository = repository

    def resolve(
        self,
        package_id: str,
        version_text: str = "",
        frameworks: Iterable[str] = (),
        include_prerelease: bool = False,
    ) -> Version:
        if version_text and version_text.strip():
            return parse_version(version_text)

        frameworks = tuple(frameworks)
        try:
            latest = self.repository.find_latest_version(
                package_id, frameworks, include_prerelease,
            )
        except (OSError, ConnectionError) as e:
            raise VersionResolutionError(
                f"查询 '{package_id}' 最新版本失败，包源不可达: {e}"
            ) from e

        if latest is None:
            label = f" (框架: {', '.join(frameworks)})" if frameworks else ""
            raise VersionResolutionError(
                f"包源 {self.repository.source} 中找不到 '{package_id}' 的可用版本{label}"
            )
        logger.info("最新版本: %s %s", package_id, latest)
        return latest
