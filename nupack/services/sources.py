"""包源注册表

从 YAML 文件加载已配置的包源，格式:

    active: nuget.org            # 可选，缺省为第一个启用的包源
    sources:
      nuget.org:
        url: https://api.nuget.org/v3/index.json
      team-share:
        url: //fileserver/packages
        enabled: false
"""

from __future__ import annotations

import logging
from pathlib import Path

from nupack.core.exceptions import ConfigError
from nupack.core.models import PackageSource
from nupack.core.registry import YamlRegistry

logger = logging.getLogger(__name__)


class SourceRegistry(YamlRegistry):
    """包源注册表，满足 SourceProvider 协议"""

    section_key = "sources"

    def __init__(self, registry_file: str | Path) -> None:
        super().__init__(registry_file)
        logger.debug("已加载 %d 个包源: %s", len(self._section()), self.registry_file)

    def list_sources(self) -> list[PackageSource]:
        sources = []
        for raw in self._list_raw():
            url = str(raw.get("url") or "").strip()
            if not url:
                raise ConfigError(f"包源 '{raw['name']}' 未定义 url")
            sources.append(PackageSource(
                name=raw["name"], url=url, enabled=bool(raw.get("enabled", True)),
            ))
        return sources

    def enabled_sources(self) -> list[PackageSource]:
        return [s for s in self.list_sources() if s.enabled]

    def get(self, name: str) -> PackageSource | None:
        for s in self.list_sources():
            if s.name == name:
                return s
        return None

    def active_source(self) -> PackageSource | None:
        """当前活动包源: 显式 active 且启用时取之，否则取第一个启用的包源"""
        enabled = self.enabled_sources()
        active_name = self._data.get("active")
        if active_name:
            for s in enabled:
                if s.name == active_name:
                    return s
            logger.warning("活动包源 '%s' 不存在或未启用，改用第一个启用的包源", active_name)
        return enabled[0] if enabled else None

    def add(self, name: str, url: str, *, enabled: bool = True) -> PackageSource:
        if not name.strip() or not url.strip():
            raise ConfigError("包源名称和 url 不能为空")
        self._put(name, {"url": url.strip(), "enabled": enabled})
        logger.info("包源已保存: %s -> %s", name, url)
        return PackageSource(name=name, url=url.strip(), enabled=enabled)

    def remove(self, name: str) -> bool:
        removed = self._remove(name)
        if removed and self._data.get("active") == name:
            self._data.pop("active")
            self._save()
        return removed

    def set_enabled(self, name: str, enabled: bool) -> bool:
        raw = self._get_raw(name)
        if raw is None:
            return False
        raw["enabled"] = enabled
        self._save()
        return True

    def set_active(self, name: str) -> None:
        if self._get_raw(name) is None:
            raise ConfigError(f"包源 '{name}' 不存在")
        self._data["active"] = name
        self._save()
