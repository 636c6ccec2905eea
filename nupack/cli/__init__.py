"""nupack 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from nupack import __version__
from nupack.core.config import init_config
from nupack.core.exceptions import NupackError
from nupack.services.container import ServiceContainer
from nupack.utils.logger import setup_logging


def _container(ctx: click.Context) -> ServiceContainer:
    """获取当前命令上下文中的服务容器"""
    return ctx.find_root().obj


def fail(exc: NupackError) -> click.ClickException:
    """业务异常转为 CLI 友好输出（非零退出码）"""
    return click.ClickException(f"[{exc.code}] {exc}")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径")
@click.pass_context
def main(ctx: click.Context, config_path: str) -> None:
    """nupack - 包清单与安装输入解析工具"""
    try:
        cfg = init_config(config_path)
    except NupackError as e:
        raise fail(e) from e
    setup_logging(
        level=os.getenv("NUPACK_LOG_LEVEL", cfg.log_level),
        json_output=os.getenv("NUPACK_LOG_JSON", "") == "1",
    )
    ctx.obj = ServiceContainer(config=cfg)


# 注册各领域子命令
from nupack.cli.cmd_install import register as _reg_install  # noqa: E402
from nupack.cli.cmd_manifest import register as _reg_manifest  # noqa: E402
from nupack.cli.cmd_serve import register as _reg_serve  # noqa: E402
from nupack.cli.cmd_sources import register as _reg_sources  # noqa: E402

_reg_install(main)
_reg_manifest(main)
_reg_sources(main)
_reg_serve(main)
