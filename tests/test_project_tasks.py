# Copyright (c) Syntropy Systems
"""Tests for the install, learn and clean tasks."""

from __future__ import annotations

from pathlib import Path

import pytest

from pasta.config import Dataset, TasksConfig
from pasta.errors import CommandFailedError, ConfigError
from pasta.tasks.project import build_registry, install_command, learn_commands

ENV = {"gubg": "/opt/gubg"}

INSTALL = ["zig", "build", "install", "--release=fast", "--prefix-exe-dir", "/opt/gubg/bin"]


class FakeShell:
    """Records commands instead of running them."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.commands: list[list[str]] = []
        self.fail_on = fail_on

    def __call__(self, argv: list[str]) -> None:
        self.commands.append(argv)
        if self.fail_on is not None and argv[0] == self.fail_on:
            raise CommandFailedError(argv, 1)


@pytest.fixture
def config(temp_dir: Path) -> TasksConfig:
    return TasksConfig(root=temp_dir)


class TestInstall:
    """Tests for the install task."""

    def test_install_fast_by_default(self, config: TasksConfig) -> None:
        """Test the default build command."""
        shell = FakeShell()

        _ = build_registry(config, shell, environ=ENV).invoke("install")

        assert shell.commands == [INSTALL]

    @pytest.mark.parametrize(
        ("mode", "flags"),
        [
            ("safe", ["--release=safe"]),
            ("fast", ["--release=fast"]),
            ("debug", []),
        ],
    )
    def test_install_modes(self, config: TasksConfig, mode: str, flags: list[str]) -> None:
        """Test the release flag for each build mode."""
        config.build.set_mode(mode)

        assert install_command(config, ENV) == [
            "zig", "build", "install", *flags, "--prefix-exe-dir", "/opt/gubg/bin",
        ]

    def test_install_root_not_set(self, config: TasksConfig) -> None:
        """Test that an unset install root fails before running anything."""
        shell = FakeShell()

        with pytest.raises(ConfigError, match="'gubg' is not set"):
            _ = build_registry(config, shell, environ={}).invoke("install")

        assert shell.commands == []

    def test_custom_prefix(self, config: TasksConfig) -> None:
        """Test a configured install root variable and bin directory."""
        config.build.prefix_env = "PREFIX"
        config.build.bin_subdir = "tools"

        argv = install_command(config, {"PREFIX": "/usr/local"})

        assert argv[-2:] == ["--prefix-exe-dir", "/usr/local/tools"]


class TestLearn:
    """Tests for the learn task."""

    def test_learn_installs_once_then_runs_datasets(self, config: TasksConfig) -> None:
        """Test install runs once, before both pasta commands, in order."""
        shell = FakeShell()

        order = build_registry(config, shell, environ=ENV).invoke("learn")

        assert order == ["install", "learn"]
        assert shell.commands == [
            INSTALL,
            ["pasta", "-i", "5de-jaar.csv", "-o", "5de-jaar", "-r", "1000"],
            ["pasta", "-i", "6de-jaar.csv", "-o", "6de-jaar", "-r", "1000"],
        ]

    def test_failed_install_skips_learning(self, config: TasksConfig) -> None:
        """Test that a failing build stops the learn task."""
        shell = FakeShell(fail_on="zig")

        with pytest.raises(CommandFailedError):
            _ = build_registry(config, shell, environ=ENV).invoke("learn")

        assert shell.commands == [INSTALL]

    def test_failed_dataset_stops_remaining(self, config: TasksConfig) -> None:
        """Test that the first failing pasta command ends the task."""
        shell = FakeShell(fail_on="pasta")

        with pytest.raises(CommandFailedError):
            _ = build_registry(config, shell, environ=ENV).invoke("learn")

        assert len(shell.commands) == 2

    def test_dataset_rounds_override(self, config: TasksConfig) -> None:
        """Test per-dataset rounds and the configured default."""
        config.learn.rounds = 50
        config.learn.datasets = [
            Dataset(input="a.csv", output="a"),
            Dataset(input="b.csv", output="b", rounds=7),
        ]

        assert learn_commands(config) == [
            ["pasta", "-i", "a.csv", "-o", "a", "-r", "50"],
            ["pasta", "-i", "b.csv", "-o", "b", "-r", "7"],
        ]


class TestClean:
    """Tests for the clean task."""

    def test_clean_removes_directories(self, config: TasksConfig, temp_dir: Path) -> None:
        """Test that both build directories are removed."""
        (temp_dir / "target" / "deep").mkdir(parents=True)
        _ = (temp_dir / "target" / "deep" / "file.o").write_text("x")
        (temp_dir / "zig-out" / "bin").mkdir(parents=True)
        _ = (temp_dir / "5de-jaar.csv").write_text("id,a\n")

        _ = build_registry(config, FakeShell(), environ=ENV).invoke("clean")

        assert not (temp_dir / "target").exists()
        assert not (temp_dir / "zig-out").exists()
        assert (temp_dir / "5de-jaar.csv").exists()

    def test_clean_when_absent(self, config: TasksConfig) -> None:
        """Test that cleaning an already clean tree succeeds."""
        shell = FakeShell()

        assert build_registry(config, shell, environ=ENV).invoke("clean") == ["clean"]
        assert shell.commands == []


class TestDefault:
    """Tests for the default task."""

    def test_default_lists_tasks(self, config: TasksConfig) -> None:
        """Test that the default task hands the registry to the lister."""
        listed: list[list[tuple[str, str]]] = []

        registry = build_registry(
            config,
            FakeShell(),
            environ=ENV,
            list_tasks=lambda reg: listed.append(reg.describe()),
        )
        _ = registry.invoke("default")

        assert listed == [[("clean", "Clean"), ("install", "Install"), ("learn", "Learn")]]
