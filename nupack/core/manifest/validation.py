"""清单字段校验

元数据、每个文件条目、每个依赖各自独立校验，
全部违规项汇总为一个 ValidationError 后再抛出。
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from nupack.core.exceptions import InvalidVersionError, ValidationError
from nupack.core.versioning import parse_version, parse_version_spec

if TYPE_CHECKING:
    from nupack.core.manifest.models import (
        Manifest,
        ManifestDependency,
        ManifestFile,
        ManifestMetadata,
    )

MAX_ID_LENGTH = 100

_ID_RE = re.compile(r"^\w+([_.-]\w+)*$")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _comma_items(value: str | None) -> list[str]:
    """逗号分隔列表中的非空项"""
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


def validate_metadata(md: ManifestMetadata) -> list[str]:
    errors: list[str] = []

    if _blank(md.id):
        errors.append("id: 必填字段缺失")
    else:
        pkg_id = md.id.strip()  # type: ignore[union-attr]
        if len(pkg_id) > MAX_ID_LENGTH:
            errors.append(f"id: 长度不能超过 {MAX_ID_LENGTH} 个字符")
        if not _ID_RE.match(pkg_id):
            errors.append(f"id: '{pkg_id}' 包含非法字符")

    if _blank(md.version):
        errors.append("version: 必填字段缺失")
    else:
        try:
            parse_version(md.version)
        except InvalidVersionError as e:
            errors.append(f"version: {e}")

    if not _comma_items(md.authors):
        errors.append("authors: 至少需要一位作者")

    if _blank(md.description):
        errors.append("description: 必填字段缺失")

    for label, value in (
        ("licenseUrl", md.license_url),
        ("projectUrl", md.project_url),
        ("iconUrl", md.icon_url),
    ):
        if value is not None and not _is_absolute_url(value):
            errors.append(f"{label}: '{value}' 不是绝对 http/https 地址")

    return errors


def validate_dependency(dep: ManifestDependency) -> list[str]:
    errors: list[str] = []
    if _blank(dep.id):
        errors.append("dependency.id: 必填字段缺失")
    if dep.version is not None and dep.version.strip():
        try:
            parse_version_spec(dep.version)
        except InvalidVersionError as e:
            errors.append(f"dependency '{dep.id}' version: {e}")
    return errors


def validate_file(entry: ManifestFile) -> list[str]:
    if _blank(entry.source):
        return ["file.src: 必填字段缺失"]
    return []


def collect_errors(manifest: Manifest) -> list[str]:
    """收集全部违规项，不抛异常"""
    errors = validate_metadata(manifest.metadata)
    for entry in manifest.files or []:
        errors.extend(validate_file(entry))
    for dep in manifest.metadata.dependencies or []:
        errors.extend(validate_dependency(dep))
    return errors


def validate_manifest(manifest: Manifest) -> None:
    """校验清单

    Raises:
        ValidationError: 存在任意违规项，message 按行列出全部违规
    """
    errors = collect_errors(manifest)
    if errors:
        raise ValidationError("\n".join(errors), details=errors)
