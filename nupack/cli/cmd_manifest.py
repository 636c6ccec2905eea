"""CLI — 包清单命令"""

from __future__ import annotations

from pathlib import Path

import click

from nupack.cli import fail
from nupack.core.exceptions import NupackError, ValidationError
from nupack.core.manifest import NUSPEC_NAMESPACE, Manifest
from nupack.utils.yaml_io import load_yaml


def register(group: click.Group) -> None:
    group.add_command(manifest)


@click.group()
def manifest() -> None:
    """包清单（.nuspec）校验与生成"""


@manifest.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def validate(path: str) -> None:
    """校验清单文件，列出全部违规项"""

    try:
        m = Manifest.load_file(path)
    except ValidationError as e:
        for detail in e.details:
            click.echo(f"  - {detail}", err=True)
        raise click.ClickException(f"清单校验失败: {path} ({len(e.details)} 项)") from e
    except NupackError as e:
        raise fail(e) from e
    click.echo(f"通过: {m.metadata.id} {m.metadata.version}")


@manifest.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def show(path: str) -> None:
    """显示清单内容"""

    try:
        md = Manifest.load_file(path).metadata
    except NupackError as e:
        raise fail(e) from e
    click.echo(f"{md.id} {md.version}")
    for label, value in (
        ("标题", md.title), ("作者", md.authors), ("所有者", md.owners),
        ("描述", md.description), ("标签", md.tags), ("项目地址", md.project_url),
    ):
        if value:
            click.echo(f"  {label}: {value}")
    for dep in md.dependencies or []:
        click.echo(f"  依赖: {dep.id} {dep.version or ''}".rstrip())


@manifest.command()
@click.argument("metadata_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", required=True, help="输出 .nuspec 路径")
@click.option("--namespace", is_flag=True, help="写出 nuspec 命名空间")
def create(metadata_file: str, output: str, namespace: bool) -> None:
    """从 YAML 元数据文件生成清单"""

    data = load_yaml(metadata_file)
    try:
        m = Manifest.create(data)
        m.save_file(Path(output), namespace=NUSPEC_NAMESPACE if namespace else None)
    except ValidationError as e:
        for detail in e.details:
            click.echo(f"  - {detail}", err=True)
        raise click.ClickException(f"元数据校验失败，未写出 {output}") from e
    except NupackError as e:
        raise fail(e) from e
    click.echo(f"已生成: {output}")
