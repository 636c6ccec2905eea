"""安装标识解析流水线

把用户输入解析为一个或多个确定版本的 PackageIdentity:

  包名            -> 指定版本则按仓库规范化，否则查询最新版本（1 个）
  packages.config -> 本地读取或远程下载，逐条解析（0..n 个，按文件顺序）
  .nupkg 路径     -> 直接读取包内 id / version，包源切换为所在目录（1 个）

仓库返回的标识可能与请求不同（如 id 大小写），调用方应使用返回值。
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from nupack.core.archive import NupkgReader
from nupack.core.classifier import classify_input
from nupack.core.exceptions import (
    NotSupportedError,
    NupackError,
    ValidationError,
    VersionResolutionError,
)
from nupack.core.lockfile import PackagesConfigReader, read_local, read_remote
from nupack.core.models import (
    InputKind,
    LockFileEntry,
    PackageIdentity,
    ResolutionContext,
    ResolutionInput,
    ResolutionResult,
)
from nupack.core.protocols import ArchiveReader, LockFileParser, PackageRepository
from nupack.core.versioning import VersionResolver, parse_version, parse_version_spec
from nupack.utils.net import is_http_source

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[str], PackageRepository]


class IdentityResolutionPipeline:
    """标识解析流水线，协作方全部通过构造函数注入"""

    def __init__(
        self,
        repository_factory: RepositoryFactory,
        *,
        archive_reader: ArchiveReader | None = None,
        lockfile_parser: LockFileParser | None = None,
        local_repository: PackageRepository | None = None,
        remote_reader: Callable[..., str] = read_remote,
        timeout: int = 30,
    ) -> None:
        self.repository_factory = repository_factory
        self.archive_reader = archive_reader or NupkgReader()
        self.lockfile_parser = lockfile_parser or PackagesConfigReader()
        self.local_repository = local_repository
        self._read_remote = remote_reader
        self.timeout = timeout

    def resolve(self, request: ResolutionInput, context: ResolutionContext) -> ResolutionResult:
        kind = classify_input(request.identifier)
        logger.info("输入分类: %s -> %s", request.identifier, kind.value)
        if kind is InputKind.LOCK_FILE:
            return self._from_lock_file(request, context)
        if kind is InputKind.ARCHIVE_PATH:
            return self._from_archive(request, context)
        return self._from_bare_name(request, context)

    # ------------------------------------------------------------------
    # 包名
    # ------------------------------------------------------------------

    def _from_bare_name(
        self, request: ResolutionInput, context: ResolutionContext,
    ) -> ResolutionResult:
        package_id = (request.identifier or "").strip()
        if not package_id:
            raise ValidationError("需要指定包 Id、packages.config 或 .nupkg 路径")

        repository = self.repository_factory(context.source)
        if request.version and request.version.strip():
            requested = PackageIdentity(package_id, parse_version(request.version))
            identity = self.resolve_identity(requested, repository, context)
        else:
            version = VersionResolver(repository).resolve(
                package_id,
                frameworks=context.frameworks,
                include_prerelease=context.include_prerelease,
            )
            identity = PackageIdentity(package_id, version)

        logger.info(
            "已解析: %s", identity,
            extra={"package_id": identity.id, "package_version": identity.version},
        )
        return ResolutionResult([identity], context)

    def resolve_identity(
        self,
        identity: PackageIdentity,
        repository: PackageRepository,
        context: ResolutionContext,
    ) -> PackageIdentity:
        """解决方案 packages 目录优先，其次当前包源

        Raises:
            VersionResolutionError: 两处均找不到，或包源不可达
        """
        if self.local_repository is not None:
            try:
                return self.local_repository.resolve_package(identity, context.include_prerelease)
            except (VersionResolutionError, OSError) as e:
                logger.debug("本地 packages 目录未命中 %s: %s", identity, e)

        try:
            return repository.resolve_package(identity, context.include_prerelease)
        except (OSError, ConnectionError) as e:
            raise VersionResolutionError(
                f"解析 {identity} 失败，包源 {context.source} 不可达: {e}"
            ) from e

    # ------------------------------------------------------------------
    # packages.config
    # ------------------------------------------------------------------

    def _read_lock_file(self, location: str) -> list[LockFileEntry]:
        # 例: https://raw.githubusercontent.com/NuGet/json-ld.net/master/src/JsonLD/packages.config
        if location.lower().startswith("http"):
            content: str | bytes = self._read_remote(location, timeout=self.timeout)
        else:
            content = read_local(location)
        return self.lockfile_parser.parse(content)

    @staticmethod
    def _entry_identity(entry: LockFileEntry) -> PackageIdentity:
        if not entry.id:
            raise ValidationError("记录缺少 id")
        version = parse_version(entry.version)
        if entry.allowed_versions:
            allowed = parse_version_spec(entry.allowed_versions)
            if not allowed.contains(version):
                raise ValidationError(f"版本 {version} 不在 allowedVersions 范围 {allowed} 内")
        return PackageIdentity(entry.id, version)

    def _from_lock_file(
        self, request: ResolutionInput, context: ResolutionContext,
    ) -> ResolutionResult:
        location = request.identifier.strip()
        try:
            entries = self._read_lock_file(location)
        except (NupackError, OSError, ConnectionError) as e:
            message = f"无法解析 {location}: {e}"
            logger.error("%s", message)
            return ResolutionResult([], context, [message])

        repository = self.repository_factory(context.source)
        identities: list[PackageIdentity] = []
        errors: list[str] = []
        for entry in entries:
            try:
                requested = self._entry_identity(entry)
                identities.append(self.resolve_identity(requested, repository, context))
            except NupackError as e:
                message = f"{entry.id or '(缺少 id)'} {entry.version}: {e}"
                logger.error("跳过 packages.config 记录 %s", message)
                errors.append(message)

        logger.info(
            "packages.config 解析完成: %d 成功, %d 失败 (%s)",
            len(identities), len(errors), location,
        )
        return ResolutionResult(identities, context, errors)

    # ------------------------------------------------------------------
    # .nupkg 路径
    # ------------------------------------------------------------------

    def _from_archive(
        self, request: ResolutionInput, context: ResolutionContext,
    ) -> ResolutionResult:
        location = request.identifier.strip()
        if is_http_source(location):
            raise NotSupportedError(f"不支持远程 .nupkg 路径: {location}")

        full_path = Path(location).expanduser().resolve()
        identity = self.archive_reader.read_identity(full_path)
        if request.version and request.version.strip():
            logger.warning(
                "忽略 --version %s，使用包文件声明的版本 %s", request.version, identity.version,
            )

        new_context = replace(context, source=str(full_path.parent))
        logger.info("从包文件读取: %s (包源切换为 %s)", identity, new_context.source)
        return ResolutionResult([identity], new_context)
