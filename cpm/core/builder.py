"""构建编排

依赖优先、深度优先地构建包：
- 已构建的包直接返回，被共享的依赖只构建一次
- 维护显式的"构建中"栈，进入包之前检查，发现环立即报错
- 弱依赖 (fetchOnly) 跳过构建
- 依赖边上的 post 命令在目标构建完成后立即执行，按边执行，不去重
"""

from __future__ import annotations

import logging
from pathlib import Path

from cpm.core.commands import OsTag, current_os, run_applicable
from cpm.core.exceptions import ConfigError, CycleError
from cpm.core.models import Package
from cpm.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """构建编排器"""

    def __init__(
        self,
        dev_root: Path,
        executor: CommandExecutor,
        target: OsTag | None = None,
    ) -> None:
        self.dev_root = dev_root
        self.executor = executor
        self.target = target or current_os()
        self.in_progress: list[str] = []

    def package_dir(self, pkg: Package) -> str:
        return str(self.dev_root / pkg.name)

    def build(self, pkg: Package) -> None:
        """先构建全部依赖，再构建包自身"""
        if pkg.built:
            logger.debug("包 %s 已经构建过", pkg.name)
            return
        if pkg.name in self.in_progress:
            raise CycleError([*self.in_progress, pkg.name])

        self.in_progress.append(pkg.name)
        logger.info("构建 %s", pkg.name)

        for edge in pkg.depends:
            if edge.fetch_only:
                logger.debug("  %s: 弱依赖，跳过构建", edge.name)
                continue
            dep = edge.target
            if dep is None:
                raise ConfigError(f"依赖 {edge.name} 尚未拉取")
            self.build(dep)
            if edge.post:
                run_applicable(
                    edge.post, self.executor, cwd=self.package_dir(dep),
                    target=self.target, label="post",
                )

        run_applicable(
            pkg.build, self.executor, cwd=self.package_dir(pkg),
            target=self.target, label="build",
        )
        self.in_progress.pop()
        pkg.built = True
        logger.info("构建完成: %s", pkg.name)
