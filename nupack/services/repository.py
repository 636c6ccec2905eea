"""包源仓库实现

- LocalFolderRepository: 本地 / UNC 目录（也用于本地缓存与解决方案 packages 目录）
- HttpFeedRepository: NuGet v3 feed（service index + flat container）

两者均满足 PackageRepository 协议；不可达时抛 OSError / ConnectionError，
找不到指定标识时抛 VersionResolutionError。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from semantic_version import Version

from nupack.core.archive import NupkgReader
from nupack.core.exceptions import (
    InvalidVersionError,
    NupackError,
    VersionResolutionError,
)
from nupack.core.models import PackageIdentity
from nupack.core.versioning import is_prerelease, parse_version
from nupack.services.source_availability import local_source_path
from nupack.utils.net import ResourceNotFound, fetch_json, is_http_source

logger = logging.getLogger(__name__)

PACKAGE_BASE_ADDRESS_TYPE = "PackageBaseAddress/3.0.0"


@dataclass(frozen=True)
class LocalPackage:
    identity: PackageIdentity
    path: Path
    frameworks: frozenset[str]


def supports_frameworks(package_frameworks: frozenset[str], requested: Sequence[str]) -> bool:
    """未声明框架子目录的包视为兼容所有框架"""
    if not requested or not package_frameworks:
        return True
    return any(f.lower() in package_frameworks for f in requested)


def _latest(versions: list[Version]) -> Version | None:
    return max(versions) if versions else None


def _json_list(document: Any, key: str, url: str) -> list:
    """取 JSON 对象中的列表字段，结构不符时视为包源故障"""
    if not isinstance(document, dict):
        raise ConnectionError(f"响应不是 JSON 对象: {url}")
    value = document.get(key, [])
    if not isinstance(value, list):
        raise ConnectionError(f"响应字段 '{key}' 不是列表: {url}")
    return value


class LocalFolderRepository:
    """本地目录仓库 — 扫描目录下所有 *.nupkg（平铺或 id/version/ 分层均可）"""

    def __init__(self, source: str, reader: NupkgReader | None = None) -> None:
        self.source = source
        self.root = local_source_path(source)
        self.reader = reader or NupkgReader()
        self._index: list[LocalPackage] | None = None

    def packages(self) -> list[LocalPackage]:
        """扫描结果按实例缓存

        Raises:
            FileNotFoundError: 目录不存在
        """
        if self._index is not None:
            return self._index
        if not self.root.is_dir():
            raise FileNotFoundError(f"本地包源不存在: {self.root}")

        index: list[LocalPackage] = []
        for path in sorted(self.root.rglob("*.nupkg")):
            try:
                identity = self.reader.read_identity(path)
                frameworks = frozenset(self.reader.list_frameworks(path))
            except NupackError as e:
                logger.warning("跳过无法读取的包 %s: %s", path, e)
                continue
            index.append(LocalPackage(identity, path, frameworks))
        logger.debug("本地包源 %s: %d 个包", self.root, len(index))
        self._index = index
        return index

    def find_latest_version(
        self,
        package_id: str,
        frameworks: Sequence[str],
        include_prerelease: bool,
    ) -> Version | None:
        wanted = package_id.lower()
        return _latest([
            p.identity.version for p in self.packages()
            if p.identity.id.lower() == wanted
            and (include_prerelease or not is_prerelease(p.identity.version))
            and supports_frameworks(p.frameworks, frameworks)
        ])

    def find_package(self, identity: PackageIdentity) -> LocalPackage | None:
        wanted = identity.id.lower()
        for p in self.packages():
            if p.identity.id.lower() == wanted and p.identity.version == identity.version:
                return p
        return None

    def resolve_package(
        self, identity: PackageIdentity, include_prerelease: bool,
    ) -> PackageIdentity:
        found = self.find_package(identity)
        if found is None:
            raise VersionResolutionError(f"包源 {self.source} 中找不到 {identity}")
        return found.identity


class HttpFeedRepository:
    """NuGet v3 feed 仓库

    flat container 不提供目标框架信息，frameworks 参数在此被忽略。
    """

    def __init__(
        self,
        source: str,
        timeout: int = 30,
        fetch: Callable[..., Any] = fetch_json,
    ) -> None:
        self.source = source
        self.timeout = timeout
        self._fetch = fetch
        self._base_address: str | None = None

    def base_address(self) -> str:
        """source 是 service index（*.json）时从中查找 flat container 地址"""
        if self._base_address is not None:
            return self._base_address
        if not self.source.lower().endswith(".json"):
            self._base_address = self.source.rstrip("/")
            return self._base_address

        index = self._fetch(self.source, timeout=self.timeout)
        for resource in _json_list(index, "resources", self.source):
            if not isinstance(resource, dict):
                continue
            if str(resource.get("@type", "")).startswith(PACKAGE_BASE_ADDRESS_TYPE):
                address = str(resource.get("@id") or "").strip()
                if not address:
                    raise ConnectionError(f"service index 资源缺少 @id: {self.source}")
                self._base_address = address.rstrip("/")
                return self._base_address
        raise ConnectionError(f"service index 中缺少 {PACKAGE_BASE_ADDRESS_TYPE}: {self.source}")

    def list_versions(self, package_id: str) -> list[Version]:
        url = f"{self.base_address()}/{package_id.lower()}/index.json"
        try:
            data = self._fetch(url, timeout=self.timeout)
        except ResourceNotFound:
            return []
        versions = []
        for raw in _json_list(data, "versions", url):
            try:
                versions.append(parse_version(str(raw)))
            except InvalidVersionError:
                logger.debug("忽略无法解析的版本: %s %s", package_id, raw)
        return versions

    def find_latest_version(
        self,
        package_id: str,
        frameworks: Sequence[str],
        include_prerelease: bool,
    ) -> Version | None:
        if frameworks:
            logger.debug("HTTP 包源不按目标框架过滤: %s", ", ".join(frameworks))
        return _latest([
            v for v in self.list_versions(package_id)
            if include_prerelease or not is_prerelease(v)
        ])

    def resolve_package(
        self, identity: PackageIdentity, include_prerelease: bool,
    ) -> PackageIdentity:
        for v in self.list_versions(identity.id):
            if v == identity.version:
                return PackageIdentity(identity.id, v)
        raise VersionResolutionError(f"包源 {self.source} 中找不到 {identity}")


def create_repository(source: str, *, timeout: int = 30) -> LocalFolderRepository | HttpFeedRepository:
    """按 source 形态选择仓库实现"""
    if is_http_source(source):
        return HttpFeedRepository(source, timeout=timeout)
    return LocalFolderRepository(source)
