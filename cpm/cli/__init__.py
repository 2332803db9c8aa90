"""cpm 命令行接口

CLI 按功能拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from cpm import __version__
from cpm.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="cpm")
def main() -> None:
    """cpm - C/C++ 多仓库包管理器"""
    setup_logging(
        level=os.getenv("CPM_LOG_LEVEL", "INFO"),
        json_output=os.getenv("CPM_LOG_JSON", "") == "1",
    )


# 注册各子命令
from cpm.cli.cmd_build import register as _reg_build  # noqa: E402
from cpm.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_build(main)
_reg_misc(main)
