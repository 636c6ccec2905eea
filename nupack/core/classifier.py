"""安装输入分类

标识符可以是包名、packages.config 路径/URL，或 .nupkg 路径。
纯函数，不访问文件系统与网络。
"""

from __future__ import annotations

from nupack.core.models import InputKind

PACKAGE_REFERENCE_FILE = "packages.config"
PACKAGE_EXTENSION = ".nupkg"


def classify_input(identifier: str | None) -> InputKind:
    """按小写后缀分类，空值或无法识别时视为包名"""
    if not identifier:
        return InputKind.BARE_NAME
    lowered = identifier.strip().lower()
    if lowered.endswith(PACKAGE_REFERENCE_FILE):
        return InputKind.LOCK_FILE
    if lowered.endswith(PACKAGE_EXTENSION):
        return InputKind.ARCHIVE_PATH
    return InputKind.BARE_NAME
