"""共享 fixture — 清单文本与 .nupkg 归档构造"""

from __future__ import annotations

import zipfile
from collections.abc import Iterable
from pathlib import Path

import pytest

from nupack.core.manifest import NUSPEC_NAMESPACE


def nuspec_xml(
    pkg_id: str = "Sample.Lib",
    version: str = "1.0.0",
    *,
    authors: str = "Alice",
    description: str = "A sample library",
    namespace: bool = False,
    extra: str = "",
) -> str:
    """构造最小合法清单，extra 追加到 metadata 内"""
    xmlns = f' xmlns="{NUSPEC_NAMESPACE}"' if namespace else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f"<package{xmlns}>\n"
        "  <metadata>\n"
        f"    <id>{pkg_id}</id>\n"
        f"    <version>{version}</version>\n"
        f"    <authors>{authors}</authors>\n"
        f"    <description>{description}</description>\n"
        f"    {extra}\n"
        "  </metadata>\n"
        "</package>\n"
    )


@pytest.fixture()
def make_nupkg(tmp_path: Path):
    """.nupkg 工厂

    用法:
        path = make_nupkg("Sample.Lib", "1.0.0", frameworks=["net45"])
    """

    def _make(
        pkg_id: str,
        version: str,
        *,
        directory: Path | None = None,
        frameworks: Iterable[str] = (),
        filename: str = "",
    ) -> Path:
        target_dir = directory or tmp_path / "feed"
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / (filename or f"{pkg_id}.{version}.nupkg")
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr(f"{pkg_id}.nuspec", nuspec_xml(pkg_id, version))
            for tfm in frameworks:
                zf.writestr(f"lib/{tfm}/{pkg_id}.dll", b"binary")
        return path

    return _make


@pytest.fixture()
def nuspec():
    """清单文本工厂，参数同 nuspec_xml"""
    return nuspec_xml
