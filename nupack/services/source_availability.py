"""包源可用性检查与本地缓存回退

规则:
  1. 用户显式指定 source 时不做任何检查，原样使用
  2. 否则只要有一个启用的 http 包源且网络可用，即视为可用
     （具体端点是否可达留到实际解析时才暴露）
  3. 本地 / UNC 包源仅当目录此刻可访问才算可用
  4. 全部不可用时回退到本地缓存目录并给出告警；缓存也无法建立时给出另一条告警

检查在解析开始前执行一次，解析过程中不再重复。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from nupack.core.protocols import SourceProvider
from nupack.utils.net import is_http_source, is_network_available

logger = logging.getLogger(__name__)

FALLBACK_TO_CACHE_MESSAGE = "包源 '{0}' 均不可用，已回退到本地缓存 '{1}'"
LOCAL_CACHE_FAILURE_MESSAGE = "包源 '{0}' 均不可用，且无法回退到本地缓存"

NO_SOURCE_LABEL = "(未配置)"


class SourceDecision(Enum):
    USE_CONFIGURED = "use-as-configured"
    FALLBACK_TO_CACHE = "fallback-to-cache"
    FAIL = "fail"


@dataclass(frozen=True)
class SourceSnapshot:
    """某一时刻单个包源的状态"""

    url: str
    is_http: bool
    accessible: bool = False   # 仅对本地 / UNC 包源有意义


@dataclass(frozen=True)
class SourceCheck:
    """可用性检查结果"""

    decision: SourceDecision
    source: str
    warning: str = ""


def decide_source(
    snapshots: Iterable[SourceSnapshot],
    network_available: bool,
    cache_available: bool,
) -> SourceDecision:
    """纯决策函数，不做任何 IO"""
    for snap in snapshots:
        if snap.is_http and network_available:
            return SourceDecision.USE_CONFIGURED
        if not snap.is_http and snap.accessible:
            return SourceDecision.USE_CONFIGURED
    if cache_available:
        return SourceDecision.FALLBACK_TO_CACHE
    return SourceDecision.FAIL


def local_source_path(source: str) -> Path:
    """本地包源路径，兼容 file:// URI"""
    parsed = urlparse(source)
    if parsed.scheme.lower() == "file":
        if parsed.netloc:
            return Path(f"//{parsed.netloc}{url2pathname(parsed.path)}")
        return Path(url2pathname(parsed.path))
    return Path(source).expanduser()


def local_source_accessible(source: str) -> bool:
    return os.path.isdir(local_source_path(source))


def ensure_cache(cache_source: str) -> bool:
    """建立本地缓存目录，失败返回 False"""
    if not cache_source:
        return False
    try:
        Path(cache_source).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("无法创建本地缓存目录 %s: %s", cache_source, e)
        return False
    return True


class SourceAvailabilityController:
    """在解析开始前决定实际使用的包源"""

    def __init__(
        self,
        provider: SourceProvider,
        cache_source: str,
        network_check: Callable[[], bool] = is_network_available,
        path_check: Callable[[str], bool] = local_source_accessible,
        cache_check: Callable[[str], bool] = ensure_cache,
    ) -> None:
        self.provider = provider
        self.cache_source = cache_source
        self._network_check = network_check
        self._path_check = path_check
        self._cache_check = cache_check

    def snapshot(self) -> list[SourceSnapshot]:
        snapshots = []
        for src in self.provider.enabled_sources():
            is_http = is_http_source(src.url)
            # http 源不探测，本地源需要真实访问
            accessible = False if is_http else self._path_check(src.url)
            snapshots.append(SourceSnapshot(src.url, is_http, accessible))
        return snapshots

    def check(self, explicit_source: str = "") -> SourceCheck:
        if explicit_source and explicit_source.strip():
            return SourceCheck(SourceDecision.USE_CONFIGURED, explicit_source.strip())

        active = self.provider.active_source()
        current = active.url if active else ""
        network_available = self._network_check()
        snapshots = self.snapshot()

        # 先判断配置源，只有需要回退时才去建立缓存目录
        decision = decide_source(snapshots, network_available, cache_available=False)
        if decision is SourceDecision.USE_CONFIGURED:
            return SourceCheck(decision, current)

        cache_ok = self._cache_check(self.cache_source)
        decision = decide_source(snapshots, network_available, cache_available=cache_ok)
        label = current or NO_SOURCE_LABEL
        if decision is SourceDecision.FALLBACK_TO_CACHE:
            warning = FALLBACK_TO_CACHE_MESSAGE.format(label, self.cache_source)
            logger.warning("%s", warning, extra={"source": self.cache_source})
            return SourceCheck(decision, self.cache_source, warning)

        warning = LOCAL_CACHE_FAILURE_MESSAGE.format(label)
        logger.warning("%s", warning, extra={"source": current})
        return SourceCheck(decision, current, warning)
