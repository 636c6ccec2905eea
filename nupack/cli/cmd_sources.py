"""CLI — 包源管理命令"""

from __future__ import annotations

import click

from nupack.cli import _container, fail
from nupack.core.exceptions import NupackError


def register(group: click.Group) -> None:
    group.add_command(sources)


@click.group()
def sources() -> None:
    """包源管理"""


@sources.command(name="list")
@click.pass_context
def list_sources(ctx: click.Context) -> None:
    """列出已配置的包源"""

    registry = _container(ctx).sources
    try:
        items = registry.list_sources()
        active = registry.active_source()
    except NupackError as e:
        raise fail(e) from e
    if not items:
        click.echo("没有已配置的包源。")
        return
    for s in items:
        marker = "*" if active and s.name == active.name else " "
        state = "启用" if s.enabled else "禁用"
        kind = "http" if s.is_http else "本地"
        click.echo(f"{marker} {s.name:20s} [{state}] [{kind:4s}] {s.url}")


@sources.command()
@click.argument("name")
@click.argument("url")
@click.option("--disabled", is_flag=True, help="添加为禁用状态")
@click.option("--active", is_flag=True, help="设为活动包源")
@click.pass_context
def add(ctx: click.Context, name: str, url: str, disabled: bool, active: bool) -> None:
    """添加或更新包源"""

    registry = _container(ctx).sources
    try:
        registry.add(name, url, enabled=not disabled)
        if active:
            registry.set_active(name)
    except NupackError as e:
        raise fail(e) from e
    click.echo(f"包源已保存: {name} -> {url}")


@sources.command()
@click.argument("name")
@click.pass_context
def remove(ctx: click.Context, name: str) -> None:
    """删除包源"""

    if _container(ctx).sources.remove(name):
        click.echo(f"包源已删除: {name}")
    else:
        raise click.ClickException(f"包源不存在: {name}")


def _set_enabled(ctx: click.Context, name: str, enabled: bool) -> None:
    if not _container(ctx).sources.set_enabled(name, enabled):
        raise click.ClickException(f"包源不存在: {name}")
    click.echo(f"包源已{'启用' if enabled else '禁用'}: {name}")


@sources.command()
@click.argument("name")
@click.pass_context
def enable(ctx: click.Context, name: str) -> None:
    """启用包源"""
    _set_enabled(ctx, name, True)


@sources.command()
@click.argument("name")
@click.pass_context
def disable(ctx: click.Context, name: str) -> None:
    """禁用包源（可用性检查与活动包源选择将跳过它）"""
    _set_enabled(ctx, name, False)
