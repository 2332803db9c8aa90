"""构建编排测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from cpm.core.builder import BuildOrchestrator
from cpm.core.commands import OsTag
from cpm.core.exceptions import CycleError, ExecutionError
from cpm.core.models import Command, DependencyEdge, Package


def _pkg(name: str, *steps: str) -> Package:
    return Package(name=name, build=[Command(cmd=s) for s in steps])


def _edge(target: Package, **kwargs) -> DependencyEdge:
    return DependencyEdge(name=target.name, target=target, **kwargs)


@pytest.fixture()
def builder(dev_root: Path, fake_git) -> BuildOrchestrator:
    return BuildOrchestrator(dev_root, fake_git, target=OsTag.LINUX)


class TestBuildOrder:
    def test_dependencies_first(self, builder, fake_git) -> None:
        c = _pkg("c", "build-c")
        b = _pkg("b", "build-b")
        b.depends = [_edge(c)]
        a = _pkg("a", "build-a")
        a.depends = [_edge(b), _edge(c)]
        builder.build(a)
        assert fake_git.tool_calls() == ["build-c", "build-b", "build-a"]
        assert a.built and b.built and c.built
        assert builder.in_progress == []

    def test_shared_dependency_built_once(self, builder, fake_git) -> None:
        shared = _pkg("shared", "build-shared")
        x = _pkg("x", "build-x")
        x.depends = [_edge(shared)]
        y = _pkg("y", "build-y")
        y.depends = [_edge(shared)]
        root = _pkg("root")
        root.depends = [_edge(x), _edge(y)]
        builder.build(root)
        assert fake_git.tool_calls() == ["build-shared", "build-x", "build-y"]

    def test_runs_in_package_dir(self, builder, fake_git, dev_root: Path) -> None:
        builder.build(_pkg("a", "make"))
        assert fake_git.calls[0].cwd == str(dev_root / "a")

    def test_no_build_steps(self, builder, fake_git) -> None:
        a = _pkg("a")
        builder.build(a)
        assert a.built
        assert fake_git.calls == []


class TestCycleDetection:
    def test_two_package_cycle(self, builder, fake_git) -> None:
        a = _pkg("A", "build-a")
        b = _pkg("B", "build-b")
        a.depends = [_edge(b)]
        b.depends = [_edge(a)]
        with pytest.raises(CycleError) as exc_info:
            builder.build(a)
        assert exc_info.value.chain == ["A", "B", "A"]
        assert fake_git.calls == []

    def test_self_dependency(self, builder) -> None:
        a = _pkg("A")
        a.depends = [_edge(a)]
        with pytest.raises(CycleError, match="A 依赖自身"):
            builder.build(a)

    def test_weak_cycle_is_allowed(self, builder, fake_git) -> None:
        a = _pkg("A", "build-a")
        b = _pkg("B", "build-b")
        a.depends = [_edge(b)]
        b.depends = [_edge(a, fetch_only=True)]
        builder.build(a)
        assert fake_git.tool_calls() == ["build-b", "build-a"]


class TestWeakDependency:
    def test_fetch_only_not_built(self, builder, fake_git) -> None:
        b = _pkg("B", "build-b")
        a = _pkg("A", "build-a")
        a.depends = [_edge(b, fetch_only=True)]
        builder.build(a)
        assert fake_git.tool_calls() == ["build-a"]
        assert not b.built


class TestPostBuild:
    def test_post_runs_after_target_in_target_dir(self, builder, fake_git, dev_root: Path) -> None:
        b = _pkg("B", "build-b")
        a = _pkg("A", "build-a")
        a.depends = [_edge(b, post=[Command(cmd="install-b")])]
        builder.build(a)
        assert fake_git.tool_calls() == ["build-b", "install-b", "build-a"]
        assert fake_git.calls[1].cwd == str(dev_root / "B")

    def test_post_runs_once_per_edge(self, builder, fake_git) -> None:
        shared = _pkg("S", "build-s")
        x = _pkg("X")
        x.depends = [_edge(shared, post=[Command(cmd="post-x")])]
        y = _pkg("Y")
        y.depends = [_edge(shared, post=[Command(cmd="post-y")])]
        root = _pkg("R")
        root.depends = [_edge(x), _edge(y)]
        builder.build(root)
        assert fake_git.tool_calls() == ["build-s", "post-x", "post-y"]

    def test_post_respects_os(self, builder, fake_git) -> None:
        b = _pkg("B")
        a = _pkg("A")
        a.depends = [_edge(b, post=[Command(cmd="copy", os="windows"), Command(cmd="cp", os="linux")])]
        builder.build(a)
        assert fake_git.tool_calls() == ["cp"]


class TestFailFast:
    def test_second_command_fails(self, builder, fake_git) -> None:
        fake_git.failures["step2"] = 1
        b = _pkg("B", "step1", "step2", "step3")
        sibling = _pkg("C", "build-c")
        a = _pkg("A", "build-a")
        a.depends = [_edge(b), _edge(sibling)]
        with pytest.raises(ExecutionError):
            builder.build(a)
        assert fake_git.tool_calls() == ["step1", "step2"]
        assert not b.built and not a.built
