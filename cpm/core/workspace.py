"""一次运行的上下文

Workspace 持有本次运行的注册表和执行器：
  根描述文件 → 拉取（递归填充注册表和文件系统）→ 构建（自底向上）
运行结束即丢弃，不存在进程级的全局包列表。
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from cpm.core.builder import BuildOrchestrator
from cpm.core.commands import OsTag
from cpm.core.config import Config, get_config
from cpm.core.descriptor import read_descriptor
from cpm.core.exceptions import ConfigError
from cpm.core.fetcher import PackageFetcher
from cpm.core.models import Package
from cpm.core.namespace import ensure_dir
from cpm.core.registry import PackageRegistry
from cpm.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """运行结果汇总"""

    root: str
    packages: list[str] = field(default_factory=list)
    built: list[str] = field(default_factory=list)
    duration: float = 0.0


def package_name_from_uri(uri: str) -> str:
    """从下载地址推断包名: https://host/org/serial.git -> serial"""
    path = urlparse(uri).path or uri
    name = path.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return name[:-4] if name.endswith(".git") else name


class Workspace:
    """开发树上的一次拉取/构建"""

    def __init__(
        self,
        config: Config | None = None,
        executor: CommandExecutor | None = None,
        target: OsTag | None = None,
    ) -> None:
        self.config = config or get_config()
        self.config.validate()
        self.executor = executor or LocalExecutor()
        self.target = target
        self.registry = PackageRegistry()

    @property
    def dev_root(self) -> Path:
        return self.config.root_path

    def descriptor_path(self, project: str | None, cwd: Path | None = None) -> Path:
        """定位根描述文件

        - 未指定: 当前目录下的描述文件
        - 包名: <devroot>/<name>/ 下的描述文件
        - 路径: <path>/ 下的描述文件
        """
        name = self.config.descriptor_name
        if not project:
            return (cwd or Path.cwd()) / name
        if "/" in project or "\\" in project:
            return Path(project).expanduser().absolute() / name
        return self.dev_root / project / name

    def resolve_root(self, project: str | None = None, cwd: Path | None = None) -> Package:
        """构造根包：指定了下载地址时由地址生成，否则读取根描述文件"""
        uri = self.config.root_uri
        if uri:
            name = project or package_name_from_uri(uri)
            if not name:
                raise ConfigError(f"无法从地址推断包名: {uri}")
            root = Package(name=Path(name).name)
            if urlparse(uri).scheme == "https":
                root.https = uri
            else:
                root.git = uri
        else:
            path = self.descriptor_path(project, cwd)
            logger.debug("根描述文件: %s", path)
            root = read_descriptor(path)
        if self.config.branch:
            root.branch = self.config.branch
        return root

    def run(self, project: str | None = None, cwd: Path | None = None) -> RunReport:
        """拉取根包及全部依赖，非仅拉取模式下再构建"""
        start = time.monotonic()
        logger.debug("DEV_ROOT=%s", self.dev_root)
        ensure_dir(self.config.lib_path)

        root = self.registry.add(self.resolve_root(project, cwd))
        fetcher = PackageFetcher(self.config, self.registry, self.executor)
        fetcher.fetch(root)

        if not self.config.fetch_only:
            builder = BuildOrchestrator(self.dev_root, self.executor, self.target)
            builder.build(root)

        report = RunReport(
            root=root.name,
            packages=[p.name for p in self.registry],
            built=[p.name for p in self.registry if p.built],
            duration=time.monotonic() - start,
        )
        logger.info(
            "完成: %d 个包, 构建 %d 个 (%.1fs)",
            len(report.packages), len(report.built), report.duration,
        )
        return report
