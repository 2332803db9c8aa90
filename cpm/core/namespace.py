"""头文件命名空间组装

在包的 include 目录下为每个依赖创建符号链接：
- 未指定 modules: include/<dep> -> <devroot>/<dep>/include/<dep>
- 指定 modules:   include/<module> -> <devroot>/<dep>/include/<module>

已存在的链接必须指向同一个文件系统实体，否则报命名空间冲突。
真实文件或目录永远不会被覆盖，因此可以安全地重复执行。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cpm.core.exceptions import FilesystemError, NamespaceCollisionError
from cpm.core.models import Package

logger = logging.getLogger(__name__)


def same_entity(link: Path, target: Path) -> bool:
    """判断 link 是否已经是指向 target 的符号链接

    两端都存在时按 inode 比较，兼容相对/绝对路径和多级链接；
    目标尚不存在（悬空链接）时退回到比较真实路径。
    """
    if not link.is_symlink():
        return False
    if link.exists() and target.exists():
        return os.path.samefile(link, target)
    return os.path.realpath(link) == os.path.realpath(target)


def ensure_symlink(link: Path, target: Path) -> bool:
    """确保 link 是指向 target 的符号链接，返回是否新建"""
    if os.path.lexists(link):
        if same_entity(link, target):
            return False
        raise NamespaceCollisionError(str(link), str(target))
    try:
        link.symlink_to(target, target_is_directory=True)
    except OSError as e:
        raise FilesystemError(f"无法创建符号链接 {link} -> {target}: {e}") from e
    logger.debug("  创建符号链接 %s -> %s", link, target)
    return True


def ensure_dir(path: Path) -> None:
    """创建目录（含父目录），失败时抛 FilesystemError"""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"无法创建目录 {path}: {e}") from e


class NamespaceComposer:
    """为包组装 include 命名空间和共享 lib 链接"""

    def __init__(self, dev_root: Path) -> None:
        self.dev_root = dev_root

    @property
    def lib_dir(self) -> Path:
        return self.dev_root / "lib"

    def package_dir(self, name: str) -> Path:
        return self.dev_root / name

    def link_lib(self, pkg: Package) -> None:
        """<pkg>/lib -> <devroot>/lib"""
        ensure_dir(self.lib_dir)
        ensure_symlink(self.package_dir(pkg.name) / "lib", self.lib_dir)

    def link_targets(self, pkg: Package) -> list[tuple[str, Path]]:
        """计算包需要的全部 (链接名, 目标路径)"""
        links: list[tuple[str, Path]] = []
        for edge in pkg.depends:
            dep_include = self.package_dir(edge.name) / "include"
            for module in edge.modules or [edge.name]:
                links.append((module, dep_include / module))
        return links

    def compose(self, pkg: Package) -> int:
        """创建包的 include 链接，返回新建的链接数"""
        if not pkg.depends:
            return 0
        include = self.package_dir(pkg.name) / "include"
        ensure_dir(include)
        created = 0
        for name, target in self.link_targets(pkg):
            if ensure_symlink(include / name, target):
                created += 1
        logger.info("  %s: include 命名空间就绪 (新建 %d 个链接)", pkg.name, created)
        return created
