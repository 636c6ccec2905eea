"""安装准备服务

先做一次包源可用性检查（必要时回退本地缓存），再运行标识解析流水线，
返回交给安装器的标识列表。检查在整个解析过程中只执行一次。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from nupack.core.exceptions import SourceUnavailableError
from nupack.core.models import ResolutionContext, ResolutionInput, ResolutionResult
from nupack.services.identity_pipeline import IdentityResolutionPipeline
from nupack.services.source_availability import (
    SourceAvailabilityController,
    SourceDecision,
)

logger = logging.getLogger(__name__)


class InstallService:
    """安装请求 -> 已解析的包标识"""

    def __init__(
        self,
        controller: SourceAvailabilityController,
        pipeline: IdentityResolutionPipeline,
        default_frameworks: Iterable[str] = (),
    ) -> None:
        self.controller = controller
        self.pipeline = pipeline
        self.default_frameworks = tuple(default_frameworks)

    def prepare(self, request: ResolutionInput) -> ResolutionResult:
        """解析安装请求

        Raises:
            SourceUnavailableError: 包源与本地缓存均不可用
            ValidationError / ParseError / VersionResolutionError / NotSupportedError
        """
        check = self.controller.check(request.source)
        if check.decision is SourceDecision.FAIL:
            raise SourceUnavailableError(check.warning)

        context = ResolutionContext(
            source=check.source,
            include_prerelease=request.include_prerelease,
            frameworks=tuple(request.frameworks) or self.default_frameworks,
            warnings=(check.warning,) if check.warning else (),
        )
        logger.info("解析安装请求: %s (包源 %s)", request.identifier, context.source or "-")
        return self.pipeline.resolve(request, context)
