"""packages.config 读取

职责:
- 解析 packages.config，按文件顺序返回原始记录
- 读取本地文件或远程 URL 内容
"""

from __future__ import annotations

import logging
from pathlib import Path

from nupack.core.exceptions import ParseError
from nupack.core.manifest.serializer import parse_xml
from nupack.core.models import LockFileEntry
from nupack.utils.net import fetch_bytes

logger = logging.getLogger(__name__)

# 部分导出工具生成的文件在按 ASCII 读取后会带出该标记（BOM 残留）
EXPORT_ARTIFACT = "???"


class PackagesConfigReader:
    """packages.config 解析器

    只负责结构解析，字段内容（版本号是否合法等）留给调用方逐条校验，
    以保证单条坏记录不影响其他记录。
    """

    def parse(self, content: str | bytes) -> list[LockFileEntry]:
        root = parse_xml(content)
        if root.tag != "packages":
            raise ParseError(f"根元素必须是 packages，实际为 '{root.tag}'")
        return [
            LockFileEntry(
                id=(el.get("id") or "").strip(),
                version=(el.get("version") or "").strip(),
                target_framework=el.get("targetFramework") or "",
                allowed_versions=el.get("allowedVersions") or "",
            )
            for el in root.findall("package")
        ]


def decode_ascii(data: bytes) -> str:
    """逐字节按 ASCII 解码，非 ASCII 字节替换为 '?'"""
    return data.decode("ascii", errors="replace").replace("\ufffd", "?")


def read_remote(url: str, *, timeout: int = 30) -> str:
    """下载远程 packages.config 文本，并移除导出工具残留的 '???' 标记"""
    text = decode_ascii(fetch_bytes(url, timeout=timeout))
    return text.replace(EXPORT_ARTIFACT, "")


def read_local(path: str | Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()
