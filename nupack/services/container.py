"""服务容器 — 显式构造并共享各协作方

依赖关系（→ 表示依赖）:
  install  → source_check, pipeline
  source_check → sources
  pipeline → repository_factory, local_repository

所有协作方通过构造函数注入；容器本身由入口（CLI / Web）显式创建，
不提供进程级全局实例。

用法:
    container = ServiceContainer(config=Config.from_file("configs/default.yml"))
    result = container.install.prepare(ResolutionInput(identifier="Newtonsoft.Json"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nupack.core.config import Config
    from nupack.core.protocols import PackageRepository
    from nupack.services.identity_pipeline import IdentityResolutionPipeline
    from nupack.services.install_service import InstallService
    from nupack.services.source_availability import SourceAvailabilityController
    from nupack.services.sources import SourceRegistry

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器 — 同一容器内的实例共享"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from nupack.core.config import Config
            config = Config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def sources(self) -> SourceRegistry:
        if "sources" not in self._instances:
            from nupack.services.sources import SourceRegistry
            self._instances["sources"] = SourceRegistry(self._config.sources_file)
        return self._instances["sources"]  # type: ignore[return-value]

    @property
    def source_check(self) -> SourceAvailabilityController:
        if "source_check" not in self._instances:
            from nupack.services.source_availability import SourceAvailabilityController
            self._instances["source_check"] = SourceAvailabilityController(
                provider=self.sources,
                cache_source=self._config.cache_dir,
            )
        return self._instances["source_check"]  # type: ignore[return-value]

    def repository(self, source: str) -> PackageRepository:
        """按 source 获取仓库，同一 source 复用实例"""
        key = f"repo:{source}"
        if key not in self._instances:
            from nupack.services.repository import create_repository
            self._instances[key] = create_repository(source, timeout=self._config.http_timeout)
        return self._instances[key]  # type: ignore[return-value]

    @property
    def local_repository(self) -> PackageRepository | None:
        """解决方案 packages 目录，未配置或不存在时为 None"""
        packages_dir = self._config.packages_dir
        if not packages_dir or not Path(packages_dir).is_dir():
            return None
        return self.repository(str(Path(packages_dir).resolve()))

    @property
    def pipeline(self) -> IdentityResolutionPipeline:
        if "pipeline" not in self._instances:
            from nupack.services.identity_pipeline import IdentityResolutionPipeline
            self._instances["pipeline"] = IdentityResolutionPipeline(
                self.repository,
                local_repository=self.local_repository,
                timeout=self._config.http_timeout,
            )
        return self._instances["pipeline"]  # type: ignore[return-value]

    @property
    def install(self) -> InstallService:
        if "install" not in self._instances:
            from nupack.services.install_service import InstallService
            self._instances["install"] = InstallService(
                controller=self.source_check,
                pipeline=self.pipeline,
                default_frameworks=self._config.default_frameworks,
            )
        return self._instances["install"]  # type: ignore[return-value]
