"""配置加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from cpm.core.config import Config, get_config, init_config
from cpm.core.exceptions import ConfigError


class TestFromFile:
    def test_missing_file_defaults(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("DEV_ROOT", raising=False)
        cfg = Config.from_file(str(tmp_path / "none.yml"))
        assert cfg == Config()

    def test_load_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "cpm.yml"
        f.write_text("dev_root: /src\nprotocol: https\nforce: true\nmirror: x\n", encoding="utf-8")
        cfg = Config.from_file(str(f))
        assert cfg.dev_root == "/src"
        assert cfg.protocol == "https"
        assert cfg.force is True
        assert cfg.extra == {"mirror": "x"}

    def test_dev_root_from_env(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("DEV_ROOT", "/env/root")
        cfg = Config.from_file(str(tmp_path / "none.yml"))
        assert cfg.dev_root == "/env/root"

    def test_file_wins_over_env(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("DEV_ROOT", "/env/root")
        f = tmp_path / "cpm.yml"
        f.write_text("dev_root: /file/root\n", encoding="utf-8")
        assert Config.from_file(str(f)).dev_root == "/file/root"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch) -> None:
        f = tmp_path / "other.yml"
        f.write_text("protocol: https\n", encoding="utf-8")
        monkeypatch.setenv("CPM_CONFIG", str(f))
        assert Config.from_file().protocol == "https"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "bad.yml"
        f.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="无法读取配置文件"):
            Config.from_file(str(f))


class TestOverride:
    def test_none_and_false_ignored(self) -> None:
        cfg = Config(dev_root="/a", force=True).override(
            dev_root=None, force=False, branch="dev", local_only=True,
        )
        assert cfg.dev_root == "/a"
        assert cfg.force is True
        assert cfg.branch == "dev"
        assert cfg.local_only is True


class TestValidate:
    def test_ok(self) -> None:
        Config(dev_root="/a").validate()

    def test_paths(self, tmp_path: Path) -> None:
        cfg = Config(dev_root=str(tmp_path))
        assert cfg.root_path == tmp_path
        assert cfg.lib_path == tmp_path / "lib"


def test_init_config(tmp_path: Path) -> None:
    f = tmp_path / "cpm.yml"
    f.write_text("protocol: https\n", encoding="utf-8")
    cfg = init_config(str(f))
    assert get_config() is cfg
