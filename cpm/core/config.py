"""集中配置管理

一次运行的全部开关（开发树根目录、下载协议、强制切换、仅拉取/仅本地等）
集中在 Config 中。支持从 YAML 文件加载 + CLI 选项覆盖。

优先级: CLI 选项 > 配置文件 > DEV_ROOT 环境变量
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from cpm.core.exceptions import ConfigError
from cpm.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

PROTOCOLS = ("git", "https")
DEFAULT_CONFIG_FILE = "~/.cpm.yml"
DESCRIPTOR_NAME = "cpm.json"


@dataclass
class Config:
    """一次运行的配置"""

    # 目录
    dev_root: str = ""
    descriptor_name: str = DESCRIPTOR_NAME

    # 下载
    protocol: str = "git"   # 优先使用的下载协议: git / https
    root_uri: str = ""      # 根包下载地址，覆盖描述文件
    branch: str = ""        # 根包分支

    # 模式
    force: bool = False       # 切换分支时丢弃本地修改
    fetch_only: bool = False  # 只拉取，不构建
    local_only: bool = False  # 只用本地代码，不 clone/pull
    verbose: bool = False

    # 放不到字段里的配置项
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        path = path or os.getenv("CPM_CONFIG", "") or DEFAULT_CONFIG_FILE
        try:
            data = load_yaml(Path(path).expanduser())
        except (yaml.YAMLError, OSError, ValueError) as e:
            raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
        cfg = cls()
        if data:
            known = {f for f in cls.__dataclass_fields__ if f != "extra"}
            cfg = cls(**{k: v for k, v in data.items() if k in known})
            cfg.extra = {k: v for k, v in data.items() if k not in known}
            logger.debug("配置已加载: %s", path)
        if not cfg.dev_root:
            cfg.dev_root = os.getenv("DEV_ROOT", "")
        return cfg

    def override(self, **options: Any) -> Config:
        """返回用 CLI 选项覆盖后的新配置

        值为 None 的选项忽略；开关类选项只能打开，未指定 (False) 时保留配置文件的值。
        """
        changes = {
            k: v for k, v in options.items() if v is not None and v is not False
        }
        return replace(self, **changes)

    def validate(self) -> None:
        if not self.dev_root:
            raise ConfigError(
                "未指定开发树根目录，且环境变量 DEV_ROOT 未设置"
            )
        if self.protocol not in PROTOCOLS:
            raise ConfigError(
                f"未知的下载协议: {self.protocol}，可选: {', '.join(PROTOCOLS)}"
            )

    @property
    def root_path(self) -> Path:
        return Path(self.dev_root).expanduser().absolute()

    @property
    def lib_path(self) -> Path:
        """所有包共享的库输出目录"""
        return self.root_path / "lib"


# 全局配置，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    return _current
