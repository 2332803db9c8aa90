"""外部命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换和跨平台适配。
子进程继承当前进程的 stdin/stdout/stderr，git 和编译器的输出直接显示给用户。
"""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Protocol

from cpm.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)

# Windows 上这些是 cmd.exe 内建命令，没有对应的可执行文件
WINDOWS_SHELL_BUILTINS = frozenset({
    "assoc", "call", "cd", "chdir", "cls", "copy", "date", "del", "dir",
    "echo", "erase", "md", "mkdir", "mklink", "move", "rd", "ren", "rename",
    "rmdir", "set", "start", "time", "type", "ver", "vol",
})


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    实现此协议即可替换底层执行方式。
    测试时可注入记录调用的假实现，无需真实的 git 或编译器。
    """

    def execute(
        self,
        program: str,
        args: list[str],
        *,
        cwd: str = ".",
    ) -> CommandResult:
        """执行命令并返回结果，程序无法启动时抛 ExecutionError"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

def wrap_for_platform(program: str, args: list[str], platform: str = "") -> list[str]:
    """按平台调整命令行，Windows 内建命令经由 cmd /c 执行"""
    platform = platform or sys.platform
    if platform == "win32" and program.lower() in WINDOWS_SHELL_BUILTINS:
        return ["cmd", "/c", program, *args]
    return [program, *args]


class LocalExecutor:
    """本地命令执行器（默认实现），标准流直接继承"""

    def execute(
        self,
        program: str,
        args: list[str],
        *,
        cwd: str = ".",
    ) -> CommandResult:
        argv = wrap_for_platform(program, args)
        logger.debug("  exec: %s (cwd=%s)", " ".join(argv), cwd)
        try:
            r = subprocess.run(argv, cwd=cwd, check=False)
        except OSError as e:
            raise ExecutionError(f"无法启动 {program}: {e}") from e
        return CommandResult(returncode=r.returncode)


def run_checked(
    executor: CommandExecutor,
    program: str,
    args: list[str],
    *,
    cwd: str = ".",
    label: str = "cmd",
) -> CommandResult:
    """执行命令，返回非零时抛 ExecutionError

    Args:
        executor: 命令执行器
        program: 程序名
        args: 参数列表
        cwd: 工作目录
        label: 日志标签
    """
    logger.info("  %s: %s %s (cwd=%s)", label, program, " ".join(args), cwd)
    r = executor.execute(program, args, cwd=cwd)
    if not r.success:
        raise ExecutionError(
            f"{label}失败 (rc={r.returncode}): {program} {' '.join(args)}",
            returncode=r.returncode,
        )
    return r
