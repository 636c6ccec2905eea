"""CLI — 安装输入解析命令"""

from __future__ import annotations

import click

from nupack.cli import _container, fail
from nupack.core.exceptions import NupackError
from nupack.core.models import ResolutionInput


def register(group: click.Group) -> None:
    group.add_command(install)


@click.command()
@click.argument("identifier")
@click.option("--version", "version", default="", help="指定版本（不指定则取最新版本）")
@click.option("--source", default="", help="指定包源（URL 或目录），跳过可用性检查")
@click.option("--prerelease", is_flag=True, help="允许预发布版本")
@click.option("--framework", "-f", multiple=True, help="目标框架，如 net45（可多次指定）")
@click.pass_context
def install(
    ctx: click.Context, identifier: str, version: str, source: str,
    prerelease: bool, framework: tuple[str, ...],
) -> None:
    """解析要安装的包：包名、packages.config 或 .nupkg 路径"""

    request = ResolutionInput(
        identifier=identifier,
        version=version,
        source=source,
        include_prerelease=prerelease,
        frameworks=framework,
    )
    try:
        result = _container(ctx).install.prepare(request)
    except NupackError as e:
        raise fail(e) from e

    for warning in result.warnings:
        click.echo(f"警告: {warning}", err=True)
    for error in result.errors:
        click.echo(f"错误: {error}", err=True)

    click.echo(f"包源: {result.source or '-'}")
    if not result.identities:
        click.echo("没有需要安装的包。")
        return
    for identity in result.identities:
        click.echo(f"  {identity.id:40s} {identity.version}")
