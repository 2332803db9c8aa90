"""统一异常体系

所有业务异常继承 CpmError。任何一种都是致命错误：核心流程不做本地恢复，
原样向上抛出，由 CLI 层统一输出到 stderr 并以非零状态退出。
"""

from __future__ import annotations


class CpmError(Exception):
    """cpm 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(CpmError):
    """配置错误：描述文件缺失/无法解析、缺少下载地址、未知协议等"""

    code = "CONFIG_ERROR"


class BranchConflictError(ConfigError):
    """同一个包被两条依赖边要求了不同的分支"""

    code = "BRANCH_CONFLICT"

    def __init__(self, package: str, existing: str, requested: str) -> None:
        super().__init__(
            f"包 {package} 的分支冲突: 已绑定 '{existing}', 又被要求 '{requested}'"
        )
        self.package = package
        self.existing = existing
        self.requested = requested


class FilesystemError(CpmError):
    """文件系统错误：无法创建目录等"""

    code = "FILESYSTEM_ERROR"


class NamespaceCollisionError(FilesystemError):
    """符号链接位置已被其他文件或指向别处的链接占用"""

    code = "NAMESPACE_COLLISION"

    def __init__(self, link: str, target: str) -> None:
        super().__init__(f"命名空间冲突: {link} 已存在且不是指向 {target} 的链接")
        self.link = link
        self.target = target


class ExecutionError(CpmError):
    """外部命令启动失败或返回非零"""

    code = "EXECUTION_ERROR"

    def __init__(self, message: str, returncode: int = -1) -> None:
        super().__init__(message)
        self.returncode = returncode


class CycleError(CpmError):
    """构建依赖存在环"""

    code = "CYCLE_ERROR"

    def __init__(self, chain: list[str]) -> None:
        super().__init__(
            f"包 {chain[-1]} 依赖自身。依赖链: {' -> '.join(chain)}"
        )
        self.chain = chain
