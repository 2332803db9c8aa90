"""包拉取引擎

职责:
- 确保包源码树在本地存在且为最新（clone / switch + pull）
- 按声明顺序递归拉取全部依赖（深度优先、首次遇到时前序处理）
- 依赖解析完成后组装 include 命名空间

所有外部命令都显式指定工作目录，不修改进程的当前目录。
"""

from __future__ import annotations

import logging
from pathlib import Path

from cpm.core.config import Config
from cpm.core.descriptor import load_descriptor, merge_descriptor
from cpm.core.exceptions import ConfigError
from cpm.core.models import Package
from cpm.core.namespace import NamespaceComposer, ensure_dir
from cpm.core.registry import PackageRegistry
from cpm.utils.shell import CommandExecutor, run_checked

logger = logging.getLogger(__name__)

VCS_MARKER = ".git"


class PackageFetcher:
    """包拉取引擎"""

    def __init__(
        self,
        config: Config,
        registry: PackageRegistry,
        executor: CommandExecutor,
        composer: NamespaceComposer | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.executor = executor
        self.dev_root = config.root_path
        self.composer = composer or NamespaceComposer(self.dev_root)

    def package_dir(self, pkg: Package) -> Path:
        return self.dev_root / pkg.name

    def fetch(self, pkg: Package) -> None:
        """拉取包及其全部依赖"""
        pacdir = self.package_dir(pkg)
        self.ensure_tree(pkg)
        logger.info("配置 %s (%s)", pkg.name, pacdir)

        self.composer.link_lib(pkg)

        desc = load_descriptor(pacdir, self.config.descriptor_name)
        if desc is not None:
            merge_descriptor(pkg, desc)
        pkg.fetched = True

        for edge in pkg.depends:
            dep, is_new = self.registry.find_or_create(edge.name)
            edge.target = dep
            if is_new:
                dep.git = edge.git
                dep.https = edge.https
                dep.branch = edge.branch
                self.fetch(dep)
            else:
                self.registry.check_branch(dep, edge.branch)
                logger.debug("包 %s 已经配置过", edge.name)

        self.composer.compose(pkg)

    # ---- 源码树 ----

    def ensure_tree(self, pkg: Package) -> None:
        """按目录状态选择 clone 或 pull"""
        pacdir = self.package_dir(pkg)
        if self.config.local_only:
            if not pacdir.is_dir():
                raise ConfigError(f"仅本地模式下 {pkg.name} 不存在: {pacdir}")
            return
        if not (pacdir / VCS_MARKER).exists():
            self.clone(pkg)
        else:
            self.pull(pkg)

    def select_source(self, pkg: Package) -> str:
        uri = pkg.source_for(self.config.protocol)
        if not uri:
            raise ConfigError(f"包 {pkg.name} 没有可用的下载地址 (git/https)")
        return uri

    def clone(self, pkg: Package) -> None:
        """克隆到 <devroot>/<name>，目录已存在（但没有版本库）时克隆到原处"""
        pacdir = self.package_dir(pkg)
        uri = self.select_source(pkg)
        ensure_dir(pacdir)
        logger.info("克隆 %s: %s", pkg.name, uri)
        args = ["clone"]
        if pkg.branch:
            args += ["-b", pkg.branch]
        args += [uri, str(pacdir)]
        run_checked(self.executor, "git", args, cwd=str(self.dev_root), label="clone")

    def pull(self, pkg: Package) -> None:
        """拉取最新代码，绑定分支时先切换到该分支"""
        cwd = str(self.package_dir(pkg))
        if pkg.branch:
            logger.info("%s: 切换到分支 %s", pkg.name, pkg.branch)
            args = ["switch"]
            if self.config.force:
                args.append("-f")
            args.append(pkg.branch)
            run_checked(self.executor, "git", args, cwd=cwd, label="switch")
        args = ["pull", "origin"]
        if pkg.branch:
            args.append(pkg.branch)
        run_checked(self.executor, "git", args, cwd=cwd, label="pull")
