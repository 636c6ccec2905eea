"""包清单（nuspec）文档模型

拆分说明:
- models.py: 清单数据类与 load / save / create 入口
- validation.py: 字段规则校验（汇总全部违规项）
- serializer.py: XML 读写（去命名空间、原子输出）
"""

from nupack.core.manifest.models import (
    Manifest,
    ManifestDependency,
    ManifestFile,
    ManifestMetadata,
)
from nupack.core.manifest.serializer import NUSPEC_NAMESPACE

__all__ = [
    "Manifest",
    "ManifestMetadata",
    "ManifestDependency",
    "ManifestFile",
    "NUSPEC_NAMESPACE",
]
