"""清单 XML 读写

读取时去除所有元素名上的命名空间，带或不带 xmlns 的文档解析结果一致。
写出时先在内存中完整序列化，调用方一次性写出。
"""

from __future__ import annotations

import xml.etree.ElementTree as ET  # nosec B405
from typing import TYPE_CHECKING

from nupack.core.exceptions import ParseError

if TYPE_CHECKING:
    from nupack.core.manifest.models import Manifest

NUSPEC_NAMESPACE = "http://schemas.microsoft.com/packaging/2010/07/nuspec.xsd"

# (XML 元素名, ManifestMetadata 属性名)，顺序即输出顺序
_TEXT_FIELDS_HEAD = (
    ("id", "id"),
    ("version", "version"),
    ("title", "title"),
    ("authors", "authors"),
    ("owners", "owners"),
    ("licenseUrl", "license_url"),
    ("projectUrl", "project_url"),
    ("iconUrl", "icon_url"),
)
_TEXT_FIELDS_TAIL = (
    ("description", "description"),
    ("summary", "summary"),
    ("language", "language"),
    ("tags", "tags"),
)

_TRUE = frozenset(("true", "1"))
_FALSE = frozenset(("false", "0"))


def strip_namespaces(root: ET.Element) -> None:
    """就地去除所有元素名上的命名空间"""
    for el in root.iter():
        if isinstance(el.tag, str) and el.tag.startswith("{"):
            el.tag = el.tag.split("}", 1)[1]


def parse_xml(content: str | bytes) -> ET.Element:
    try:
        root = ET.fromstring(content)  # nosec B314
    except ET.ParseError as e:
        raise ParseError(f"XML 文档格式错误: {e}") from e
    strip_namespaces(root)
    return root


def _parse_bool(text: str | None) -> bool:
    value = (text or "").strip().lower()
    if not value or value in _FALSE:
        return False
    if value in _TRUE:
        return True
    raise ParseError(f"requireLicenseAcceptance 不是合法布尔值: '{text}'")


def deserialize(content: str | bytes) -> Manifest:
    """XML -> Manifest，不做校验"""
    from nupack.core.manifest.models import (
        Manifest,
        ManifestDependency,
        ManifestFile,
        ManifestMetadata,
    )

    root = parse_xml(content)
    if root.tag != "package":
        raise ParseError(f"根元素必须是 package，实际为 '{root.tag}'")

    md = ManifestMetadata()
    md_el = root.find("metadata")
    if md_el is not None:
        for tag, attr in _TEXT_FIELDS_HEAD + _TEXT_FIELDS_TAIL:
            child = md_el.find(tag)
            if child is not None:
                setattr(md, attr, child.text)
        md.require_license_acceptance = _parse_bool(
            md_el.findtext("requireLicenseAcceptance"),
        )
        deps_el = md_el.find("dependencies")
        if deps_el is not None:
            deps = [
                ManifestDependency(id=d.get("id"), version=d.get("version"))
                for d in deps_el.iter("dependency")
            ]
            md.dependencies = deps or None

    files = None
    files_el = root.find("files")
    if files_el is not None:
        files = [
            ManifestFile(
                source=f.get("src"), target=f.get("target"), exclude=f.get("exclude"),
            )
            for f in files_el.findall("file")
        ]

    return Manifest(metadata=md, files=files)


def _sub(parent: ET.Element, tag: str, text: str | None) -> None:
    if text is not None:
        ET.SubElement(parent, tag).text = text


def serialize(manifest: Manifest, namespace: str | None = None) -> bytes:
    """Manifest -> UTF-8 XML 字节，None 字段不输出"""
    root = ET.Element("package")
    if namespace:
        root.set("xmlns", namespace)

    md = manifest.metadata
    md_el = ET.SubElement(root, "metadata")
    for tag, attr in _TEXT_FIELDS_HEAD:
        _sub(md_el, tag, getattr(md, attr))
    _sub(md_el, "requireLicenseAcceptance", "true" if md.require_license_acceptance else "false")
    for tag, attr in _TEXT_FIELDS_TAIL:
        _sub(md_el, tag, getattr(md, attr))

    if md.dependencies:
        deps_el = ET.SubElement(md_el, "dependencies")
        for dep in md.dependencies:
            attrs = {"id": dep.id or ""}
            if dep.version is not None:
                attrs["version"] = dep.version
            ET.SubElement(deps_el, "dependency", attrs)

    if manifest.files is not None:
        files_el = ET.SubElement(root, "files")
        for f in manifest.files:
            attrs = {"src": f.source or ""}
            if f.target is not None:
                attrs["target"] = f.target
            if f.exclude is not None:
                attrs["exclude"] = f.exclude
            ET.SubElement(files_el, "file", attrs)

    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)
