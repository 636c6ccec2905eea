""".nupkg 归档读取

.nupkg 是 zip 包，根目录下有且只有一个 *.nuspec 清单。
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from nupack.core.exceptions import ParseError
from nupack.core.manifest import Manifest
from nupack.core.models import PackageIdentity
from nupack.core.versioning import parse_version

logger = logging.getLogger(__name__)


class NupkgReader:
    """读取 .nupkg 中的清单与目标框架信息"""

    def read_manifest(self, path: Path) -> Manifest:
        """读取归档内清单

        Raises:
            ParseError: 文件不存在、不是 zip 包或缺少 .nuspec
            ValidationError: 清单字段校验失败
        """
        try:
            with zipfile.ZipFile(path) as zf:
                nuspec = self._find_nuspec(zf, path)
                with zf.open(nuspec) as f:
                    return Manifest.load(f)
        except FileNotFoundError as e:
            raise ParseError(f"包文件不存在: {path}") from e
        except (zipfile.BadZipFile, OSError) as e:
            raise ParseError(f"无法读取包文件 {path}: {e}") from e

    def read_identity(self, path: Path) -> PackageIdentity:
        md = self.read_manifest(path).metadata
        return PackageIdentity(md.id or "", parse_version(md.version))

    def list_frameworks(self, path: Path) -> set[str]:
        """列出 lib/<tfm>/ 下声明的目标框架（小写），无框架子目录时返回空集"""
        frameworks: set[str] = set()
        try:
            with zipfile.ZipFile(path) as zf:
                for name in zf.namelist():
                    parts = name.split("/")
                    if len(parts) >= 3 and parts[0].lower() == "lib" and parts[1]:
                        frameworks.add(parts[1].lower())
        except (zipfile.BadZipFile, OSError) as e:
            raise ParseError(f"无法读取包文件 {path}: {e}") from e
        return frameworks

    @staticmethod
    def _find_nuspec(zf: zipfile.ZipFile, path: Path) -> str:
        candidates = [
            n for n in zf.namelist()
            if "/" not in n and n.lower().endswith(".nuspec")
        ]
        if not candidates:
            raise ParseError(f"包文件中缺少 .nuspec 清单: {path}")
        if len(candidates) > 1:
            logger.warning("包文件含多个清单，使用第一个: %s -> %s", path, candidates[0])
        return candidates[0]
