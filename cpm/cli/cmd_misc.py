"""CLI — 杂项命令（版本、依赖查看）"""

from __future__ import annotations

from pathlib import Path

import click

from cpm import __version__
from cpm.core.commands import current_os, match_count
from cpm.core.config import DESCRIPTOR_NAME
from cpm.core.descriptor import read_descriptor
from cpm.core.exceptions import CpmError


def register(group: click.Group) -> None:
    group.add_command(version)
    group.add_command(show)


@click.command()
def version() -> None:
    """显示版本号"""
    click.echo(f"C/C++ Package Manager {__version__}")


@click.command()
@click.argument("path", default=".")
def show(path: str) -> None:
    """显示描述文件中的依赖和适用于本机的构建命令"""
    p = Path(path)
    if p.is_dir():
        p = p / DESCRIPTOR_NAME
    try:
        pkg = read_descriptor(p)
    except CpmError as e:
        raise click.ClickException(str(e)) from e

    branch = f" @{pkg.branch}" if pkg.branch else ""
    click.echo(f"{pkg.name}{branch}")
    for edge in pkg.depends:
        flags = []
        if edge.branch:
            flags.append(f"branch={edge.branch}")
        if edge.modules:
            flags.append(f"modules={','.join(edge.modules)}")
        if edge.fetch_only:
            flags.append("fetch-only")
        extra = f" ({'; '.join(flags)})" if flags else ""
        click.echo(f"  depends: {edge.name}{extra}")
    target = current_os()
    for c in pkg.build:
        if match_count(c.os, target):
            click.echo(f"  build: {c.cmd} {' '.join(c.args)}".rstrip())
