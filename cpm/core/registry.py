"""包注册表

一次运行中发现的全部包，按名字去重；每个名字只允许绑定一个分支。
由 Workspace 持有，显式传给拉取和构建流程。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from cpm.core.exceptions import BranchConflictError
from cpm.core.models import DEFAULT_BRANCH, Package

logger = logging.getLogger(__name__)


class PackageRegistry:
    """包注册表"""

    def __init__(self) -> None:
        self._packages: dict[str, Package] = {}
        self.root: str = ""

    def find_or_create(self, name: str) -> tuple[Package, bool]:
        """查找包，不存在则创建并登记一个只有名字的空包

        返回 (package, is_new)。is_new 为 True 时调用方需要继续拉取该包。
        """
        pkg = self._packages.get(name)
        if pkg is not None:
            return pkg, False
        pkg = Package(name=name)
        self._packages[name] = pkg
        return pkg, True

    def add(self, pkg: Package) -> Package:
        """登记一个已填充的包（根包）"""
        if not self.root:
            self.root = pkg.name
        return self._packages.setdefault(pkg.name, pkg)

    def check_branch(self, pkg: Package, requested: str) -> None:
        """校验已登记的包与新依赖边要求的分支一致

        未指定分支的依赖边要求默认分支，与绑定顺序无关。
        根包的分支由命令行或根描述文件决定，指回根包且未指定分支的依赖边不做要求。
        """
        if requested == pkg.branch:
            return
        if not requested and pkg.name == self.root:
            return
        raise BranchConflictError(
            pkg.name, pkg.branch or DEFAULT_BRANCH, requested or DEFAULT_BRANCH,
        )

    def get(self, name: str) -> Package | None:
        return self._packages.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())
