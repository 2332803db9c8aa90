"""CLI — 拉取与构建命令"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

import click

from cpm.core.config import PROTOCOLS, init_config
from cpm.core.exceptions import CpmError
from cpm.core.workspace import Workspace
from cpm.utils.logger import setup_logging


def register(group: click.Group) -> None:
    group.add_command(build)
    group.add_command(fetch)


def _run_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """build / fetch 共用的选项"""
    options = [
        click.argument("project", required=False),
        click.option("--branch", "-b", default=None, help="根包检出的分支"),
        click.option("--force", "-F", is_flag=True, help="切换分支时丢弃本地修改"),
        click.option("--local-only", "-l", is_flag=True, help="只用本地代码（不 clone/pull）"),
        click.option("--root", "-r", "dev_root", default=None, help="开发树根目录（默认 $DEV_ROOT）"),
        click.option("--uri", "-u", "root_uri", default=None, help="根包下载地址"),
        click.option("--proto", "-p", "protocol", default=None,
                     type=click.Choice(PROTOCOLS), help="优先使用的下载协议"),
        click.option("--verbose", "-v", is_flag=True, help="输出详细日志"),
        click.option("--config", "-c", "config_path", default="", help="配置文件路径（默认 ~/.cpm.yml）"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _execute(project: str | None, config_path: str, **options: Any) -> None:
    try:
        cfg = init_config(config_path).override(**options)
        if cfg.verbose:
            setup_logging(
                level="DEBUG",
                json_output=os.getenv("CPM_LOG_JSON", "") == "1",
            )
        report = Workspace(cfg).run(project)
    except CpmError as e:
        logging.getLogger(__name__).debug("运行中止", exc_info=True)
        raise click.ClickException(str(e)) from e
    click.echo(f"cpm 运行结束，耗时 {report.duration:.1f}s")


@click.command()
@_run_options
@click.option("--fetch-only", "-f", is_flag=True, help="只拉取，不构建")
def build(project: str | None, config_path: str, **options: Any) -> None:
    """拉取项目及全部依赖，并按依赖顺序构建"""
    _execute(project, config_path, **options)


@click.command()
@_run_options
def fetch(project: str | None, config_path: str, **options: Any) -> None:
    """只拉取项目及全部依赖，不构建"""
    _execute(project, config_path, fetch_only=True, **options)
