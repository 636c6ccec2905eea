"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from nupack.core.exceptions import ConfigError
from nupack.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


def _default_cache_dir() -> str:
    """机器级本地缓存目录，可用 NUPACK_CACHE_DIR 覆盖"""
    override = os.environ.get("NUPACK_CACHE_DIR", "").strip()
    if override:
        return override
    return str(Path.home() / ".nupack" / "cache")


@dataclass
class Config:
    """全局配置"""

    # 目录
    sources_file: str = "configs/sources.yml"
    cache_dir: str = field(default_factory=_default_cache_dir)
    packages_dir: str = "packages"   # 解决方案级已安装包目录，空串表示不启用

    # 网络
    http_timeout: int = 30

    # 解析
    default_frameworks: list[str] = field(default_factory=list)

    # 日志
    log_level: str = "INFO"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        frameworks = matched.get("default_frameworks")
        if frameworks is not None and not isinstance(frameworks, list):
            raise ConfigError(f"default_frameworks 必须是列表: {path}")
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)


# 当前配置，首次 import 时不加载文件；由 CLI / Web 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/default.yml") -> Config:
    """从文件初始化当前配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
