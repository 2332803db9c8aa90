"""核心数据模型

Package / DependencyEdge / Command 集中定义，
描述文件解析、拉取、构建各模块统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BRANCH = "default"  # 未指定分支时在错误信息中使用的占位名


@dataclass
class Command:
    """一条构建命令"""

    cmd: str
    args: list[str] = field(default_factory=list)
    os: str = ""  # 空、"any" 或空格分隔的 OS 标识列表


@dataclass
class DependencyEdge:
    """依赖边 — 由引用方的描述文件声明"""

    name: str
    git: str = ""
    https: str = ""
    branch: str = ""
    modules: list[str] = field(default_factory=list)  # 为空时暴露整个包的命名空间
    fetch_only: bool = False  # 弱依赖：只拉取和链接，不构建
    post: list[Command] = field(default_factory=list)  # 目标构建完成后执行
    target: Package | None = field(default=None, repr=False, compare=False)


@dataclass
class Package:
    """依赖图中的一个包"""

    name: str
    git: str = ""
    https: str = ""
    branch: str = ""
    build: list[Command] = field(default_factory=list)
    depends: list[DependencyEdge] = field(default_factory=list)
    fetched: bool = False
    built: bool = False

    @property
    def sources(self) -> dict[str, str]:
        """按协议标记的下载地址"""
        return {k: v for k, v in (("git", self.git), ("https", self.https)) if v}

    @property
    def branch_label(self) -> str:
        return self.branch or DEFAULT_BRANCH

    def source_for(self, protocol: str) -> str:
        """按协议偏好选择下载地址，首选未设置时回退到另一个协议"""
        sources = self.sources
        if protocol in sources:
            return sources[protocol]
        return next(iter(sources.values()), "")
