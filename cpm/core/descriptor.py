"""包描述文件 (cpm.json) 加载

职责:
- 读取包工作目录下的描述文件并解析为 Package
- 描述文件不存在不算错误：视为没有依赖和构建步骤
- 键名不区分大小写（兼容 "Name" / "name" 两种写法）
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from cpm.core.config import DESCRIPTOR_NAME
from cpm.core.exceptions import ConfigError
from cpm.core.models import Command, DependencyEdge, Package

logger = logging.getLogger(__name__)


def _lower_keys(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: 应为 JSON 对象，实际为 {type(data).__name__}")
    return {str(k).lower(): v for k, v in data.items()}


def _str_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: 应为字符串列表")
    return list(value)


def _str_field(entry: dict[str, Any], key: str, where: str) -> str:
    value = entry.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{where}.{key}: 应为字符串")
    return value


def _bool_field(entry: dict[str, Any], key: str, where: str) -> bool:
    value = entry.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"{where}.{key}: 应为 true 或 false")
    return value


def _parse_commands(items: Any, where: str) -> list[Command]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ConfigError(f"{where}: 应为命令列表")
    commands = []
    for i, raw in enumerate(items):
        entry = _lower_keys(raw, f"{where}[{i}]")
        cmd = entry.get("cmd")
        if not cmd or not isinstance(cmd, str):
            raise ConfigError(f"{where}[{i}]: 缺少 cmd")
        commands.append(Command(
            cmd=cmd,
            args=_str_list(entry.get("args"), f"{where}[{i}].args"),
            os=_str_field(entry, "os", f"{where}[{i}]"),
        ))
    return commands


def _parse_edge(raw: Any, where: str) -> DependencyEdge:
    entry = _lower_keys(raw, where)
    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ConfigError(f"{where}: 缺少依赖包 name")
    modules = _str_list(entry.get("modules"), f"{where}.modules")
    # 旧格式只支持单个 module
    module = _str_field(entry, "module", where)
    if not modules and module:
        modules = [module]
    return DependencyEdge(
        name=name,
        git=_str_field(entry, "git", where),
        https=_str_field(entry, "https", where),
        branch=_str_field(entry, "branch", where),
        modules=modules,
        fetch_only=_bool_field(entry, "fetchonly", where),
        post=_parse_commands(entry.get("post"), f"{where}.post"),
    )


def parse_descriptor(data: Any, source: str = DESCRIPTOR_NAME) -> Package:
    """把已解码的 JSON 数据映射为 Package"""
    entry = _lower_keys(data, source)
    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ConfigError(f"{source}: 缺少包 name")
    depends = entry.get("depends") or []
    if not isinstance(depends, list):
        raise ConfigError(f"{source}: depends 应为列表")
    return Package(
        name=name,
        git=_str_field(entry, "git", source),
        https=_str_field(entry, "https", source),
        branch=_str_field(entry, "branch", source),
        build=_parse_commands(entry.get("build"), f"{source}: build"),
        depends=[
            _parse_edge(d, f"{source}: depends[{i}]") for i, d in enumerate(depends)
        ],
    )


def read_descriptor(path: Path) -> Package:
    """读取并解析描述文件，文件必须存在"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"无法打开描述文件 '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"无法解析 {path} - 不是 UTF-8 编码: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"无法解析 {path} - {e}") from e
    return parse_descriptor(data, str(path))


def load_descriptor(
    pkg_dir: Path, descriptor_name: str = DESCRIPTOR_NAME,
) -> Package | None:
    """加载包目录下的描述文件，不存在时返回 None"""
    path = pkg_dir / descriptor_name
    if not path.is_file():
        logger.debug("  %s 不存在，视为没有依赖", path)
        return None
    return read_descriptor(path)


def merge_descriptor(pkg: Package, desc: Package) -> None:
    """把描述文件内容合并进注册表中的包

    构建步骤和依赖边以描述文件为准；下载地址只在原来未设置时补充；
    分支在拉取前已经绑定，这里不再改变。
    """
    if desc.name != pkg.name:
        logger.warning("描述文件中的包名 %s 与目录名 %s 不一致", desc.name, pkg.name)
    pkg.git = pkg.git or desc.git
    pkg.https = pkg.https or desc.https
    pkg.build = desc.build
    pkg.depends = desc.depends
