"""按操作系统分派构建命令

命令的 os 字段为空、"any" 或空格分隔的 OS 标识列表。
匹配规则是纯函数，与宿主机检测方式无关，测试时直接传入目标 OS 即可。
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum

from cpm.core.models import Command
from cpm.utils.shell import CommandExecutor, run_checked

logger = logging.getLogger(__name__)


class OsTag(str, Enum):
    """目标操作系统标识"""

    LINUX = "linux"
    WINDOWS = "windows"
    DARWIN = "darwin"
    FREEBSD = "freebsd"
    ANY = "any"


def current_os(platform: str = "") -> OsTag:
    """把 sys.platform 映射为 OsTag"""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return OsTag.WINDOWS
    if platform == "darwin":
        return OsTag.DARWIN
    if platform.startswith("freebsd"):
        return OsTag.FREEBSD
    return OsTag.LINUX


def match_count(pattern: str, target: OsTag) -> int:
    """返回命令在 target 上应执行的次数

    每个等于 target 或 "any" 的标记各计一次，空模式等同于 "any"。
    """
    tokens = pattern.split() or [OsTag.ANY.value]
    return sum(1 for t in tokens if t in (target.value, OsTag.ANY.value))


def applies(pattern: str, target: OsTag) -> bool:
    return match_count(pattern, target) > 0


def expand_args(args: list[str]) -> list[str]:
    """展开参数中的环境变量引用"""
    return [os.path.expandvars(a) for a in args]


def run_applicable(
    commands: list[Command],
    executor: CommandExecutor,
    *,
    cwd: str,
    target: OsTag | None = None,
    label: str = "build",
) -> int:
    """按声明顺序执行适用于目标 OS 的命令，返回执行的命令数

    任何命令返回非零立即抛 ExecutionError，后续命令不再执行。
    """
    target = target or current_os()
    if not commands:
        logger.debug("  没有%s命令", label)
        return 0
    executed = 0
    for c in commands:
        for _ in range(match_count(c.os, target)):
            logger.debug("  OS: %s cmd: %s %s", c.os or OsTag.ANY.value, c.cmd, c.args)
            run_checked(executor, c.cmd, expand_args(c.args), cwd=cwd, label=label)
            executed += 1
    return executed
