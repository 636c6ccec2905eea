"""清单数据模型

Manifest 持有唯一的 ManifestMetadata 和可选的文件列表。
加载与保存两端都会执行校验，校验是关口而非一次性检查。
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nupack.core.protocols import PackageMetadata

logger = logging.getLogger(__name__)

# Load 时需要去除首尾空白的自由文本字段
TRIMMED_FIELDS = (
    "id", "title", "authors", "owners",
    "description", "summary", "language", "tags",
)


@dataclass
class ManifestDependency:
    """依赖声明: id + 版本范围字符串"""

    id: str | None = None
    version: str | None = None


@dataclass
class ManifestFile:
    """打包文件声明"""

    source: str | None = None
    target: str | None = None
    exclude: str | None = None


@dataclass
class ManifestMetadata:
    """清单元数据"""

    id: str | None = None
    version: str | None = None
    title: str | None = None
    authors: str | None = None          # 逗号分隔
    owners: str | None = None           # 逗号分隔，缺省取 authors
    license_url: str | None = None
    project_url: str | None = None
    icon_url: str | None = None
    require_license_acceptance: bool = False
    description: str | None = None
    summary: str | None = None
    language: str | None = None
    tags: str | None = None
    dependencies: list[ManifestDependency] | None = None   # 为空时为 None，不输出空集合


def _safe_trim(value: str | None) -> str | None:
    return value.strip() if value is not None else None


def _to_string_safe(value: Any) -> str | None:
    return str(value) if value is not None else None


def _get(source: Any, name: str) -> Any:
    """同时支持属性访问与字典访问"""
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _text(value: Any) -> str | None:
    """标量转字符串并去除首尾空白，空串视为缺失"""
    text = _safe_trim(_to_string_safe(value))
    return text or None


def _join(values: Any, separator: str) -> str | None:
    """列表或分隔字符串 -> 以 separator 连接的字符串，无有效项时为 None"""
    if values is None:
        return None
    if isinstance(values, str):
        values = values.split(separator.strip() or None)
    elif not isinstance(values, Iterable):
        values = [values]
    items = [str(v).strip() for v in values if v is not None and str(v).strip()]
    if not items:
        return None
    return separator.join(items)


def _comma_join(values: Iterable[str] | str | None) -> str | None:
    return _join(values, ",")


def _url_string(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _dependency_from(source: Any) -> ManifestDependency:
    spec = _get(source, "version_spec")
    if spec is None:
        spec = _get(source, "version")
    return ManifestDependency(
        id=_safe_trim(_to_string_safe(_get(source, "id"))),
        version=_to_string_safe(spec),
    )


@dataclass
class Manifest:
    """包清单文档（根元素 package）"""

    metadata: ManifestMetadata = field(default_factory=ManifestMetadata)
    files: list[ManifestFile] | None = None

    def __post_init__(self) -> None:
        if self.metadata is None:
            self.metadata = ManifestMetadata()

    # ------------------------------------------------------------------
    # 读写
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, stream: IO[bytes] | IO[str]) -> Manifest:
        """从流读取清单

        Raises:
            ParseError: 文档格式错误
            ValidationError: 字段校验失败（汇总全部违规项）
        """
        from nupack.core.manifest.serializer import deserialize
        from nupack.core.manifest.validation import validate_manifest

        manifest = deserialize(stream.read())
        validate_manifest(manifest)

        md = manifest.metadata
        for name in TRIMMED_FIELDS:
            setattr(md, name, _safe_trim(getattr(md, name)))
        return manifest

    @classmethod
    def load_file(cls, path: str | Path) -> Manifest:
        with open(path, "rb") as f:
            return cls.load(f)

    def save(self, stream: IO[bytes] | IO[str], namespace: str | None = None) -> None:
        """校验后写出清单，校验失败时不写入任何字节"""
        from nupack.core.manifest.serializer import serialize
        from nupack.core.manifest.validation import validate_manifest

        validate_manifest(self)
        data = serialize(self, namespace=namespace)
        if isinstance(stream, io.TextIOBase):
            stream.write(data.decode("utf-8"))
        else:
            stream.write(data)  # type: ignore[arg-type]

    def save_file(self, path: str | Path, namespace: str | None = None) -> None:
        """原子写入文件，失败时不留下半截文件"""
        from nupack.core.manifest.serializer import serialize
        from nupack.core.manifest.validation import validate_manifest
        from nupack.utils.yaml_io import atomic_write_bytes

        validate_manifest(self)
        atomic_write_bytes(Path(path), serialize(self, namespace=namespace))
        logger.info("清单已保存: %s", path)

    # ------------------------------------------------------------------
    # 构造
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, source: PackageMetadata | Mapping[str, Any]) -> Manifest:
        """从任意携带元数据的对象（或字典）构造清单

        规则:
          - owners 缺省取 authors
          - tags / url 为空时置 None，不输出空字符串
          - 无依赖时 dependencies 为 None，不输出空集合
        """
        authors = _comma_join(_get(source, "authors"))
        dependencies = _get(source, "dependencies")
        dep_list = [_dependency_from(d) for d in dependencies] if dependencies else []

        metadata = ManifestMetadata(
            id=_safe_trim(_to_string_safe(_get(source, "id"))),
            version=_to_string_safe(_get(source, "version")),
            title=_text(_get(source, "title")),
            authors=authors,
            owners=_comma_join(_get(source, "owners")) or authors,
            tags=_join(_get(source, "tags"), " "),
            license_url=_url_string(_get(source, "license_url")),
            project_url=_url_string(_get(source, "project_url")),
            icon_url=_url_string(_get(source, "icon_url")),
            require_license_acceptance=bool(_get(source, "require_license_acceptance")),
            description=_text(_get(source, "description")),
            summary=_text(_get(source, "summary")),
            language=_text(_get(source, "language")),
            dependencies=dep_list or None,
        )
        return cls(metadata=metadata)
