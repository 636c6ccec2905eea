"""CLI — Web API 服务"""

from __future__ import annotations

import click

from nupack.cli import _container


def register(group: click.Group) -> None:
    group.add_command(serve)


@click.command()
@click.option("--host", default="127.0.0.1", help="监听地址")
@click.option("--port", default=8888, help="监听端口")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """启动解析 Web API"""
    from nupack.web.app import run_server
    run_server(_container(ctx), host=host, port=port)
