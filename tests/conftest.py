"""测试共享 fixture — 假 git 执行器 + 开发树

FakeGit 实现 CommandExecutor 协议：
  - git clone <uri> <dir>: 创建目录、.git 标记，并写入 remotes[uri] 中的描述文件
  - git switch / pull: 直接成功
  - 其他命令: 记录调用，按 failures 返回退出码
所有调用按顺序记录在 calls 中，无需真实的 git 或编译器。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from cpm.core.config import Config
from cpm.utils.shell import CommandResult


@dataclass
class Call:
    program: str
    args: list[str]
    cwd: str


@dataclass
class FakeGit:
    remotes: dict[str, dict[str, Any] | None] = field(default_factory=dict)
    failures: dict[str, int] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)

    def execute(self, program: str, args: list[str], *, cwd: str = ".") -> CommandResult:
        self.calls.append(Call(program, list(args), cwd))
        if program == "git" and args and args[0] == "clone":
            uri, dest = args[-2], Path(args[-1])
            dest.mkdir(parents=True, exist_ok=True)
            (dest / ".git").mkdir(exist_ok=True)
            desc = self.remotes.get(uri)
            if desc is not None:
                (dest / "cpm.json").write_text(json.dumps(desc), encoding="utf-8")
            return CommandResult(returncode=0)
        key = " ".join([program, *args])
        return CommandResult(returncode=self.failures.get(key, 0))

    def git_calls(self, verb: str) -> list[Call]:
        return [c for c in self.calls if c.program == "git" and c.args[0] == verb]

    def tool_calls(self) -> list[str]:
        """非 git 命令，格式为 "program args..." """
        return [" ".join([c.program, *c.args]) for c in self.calls if c.program != "git"]


@pytest.fixture()
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture()
def dev_root(tmp_path: Path) -> Path:
    root = tmp_path / "dev"
    root.mkdir()
    return root


@pytest.fixture()
def config(dev_root: Path) -> Config:
    return Config(dev_root=str(dev_root))
