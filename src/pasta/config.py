# Copyright (c) Syntropy Systems
"""Configuration management for pasta."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

from pasta.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "pasta.yaml"

# Build modes understood by `zig build --release=<mode>`; debug passes no flag
BUILD_MODES = ("safe", "fast", "debug")


@dataclass
class Dataset:
    """One `pasta` invocation of the learn task."""

    input: str
    output: str
    rounds: int | None = None


def _default_datasets() -> list[Dataset]:
    return [
        Dataset(input="5de-jaar.csv", output="5de-jaar"),
        Dataset(input="6de-jaar.csv", output="6de-jaar"),
    ]


@dataclass
class BuildConfig:
    """Settings for the install task."""

    mode: str = "fast"

    # Environment variable naming the install root
    prefix_env: str = "gubg"

    # Executables land in <install root>/<bin_subdir>
    bin_subdir: str = "bin"

    def set_mode(self, mode: str) -> None:
        """Select a build mode, rejecting unknown ones."""
        if mode not in BUILD_MODES:
            msg = f"Unknown build mode '{mode}' (expected one of {', '.join(BUILD_MODES)})"
            raise ConfigError(msg)
        self.mode = mode

    def release_flag(self) -> str | None:
        """Return the `--release=<mode>` flag, or None for debug builds."""
        if self.mode in ("safe", "fast"):
            return f"--release={self.mode}"
        return None

    def bin_dir(self, environ: dict[str, str] | None = None) -> Path:
        """Resolve the executable install directory from the environment."""
        env = os.environ if environ is None else environ
        root = env.get(self.prefix_env)
        if not root:
            msg = f"Environment variable '{self.prefix_env}' is not set"
            raise ConfigError(msg)
        return Path(root) / self.bin_subdir


@dataclass
class LearnDefaults:
    """Defaults for the learn task and the `pasta` runner."""

    rounds: int = 1000
    clusters: int = 3
    max_iter: int = 100
    tol: float = 1e-4
    datasets: list[Dataset] = field(default_factory=_default_datasets)


@dataclass
class TasksConfig:
    """Configuration for pasta."""

    build: BuildConfig = field(default_factory=BuildConfig)
    learn: LearnDefaults = field(default_factory=LearnDefaults)

    # Directories removed by the clean task
    clean: list[str] = field(default_factory=lambda: ["target", "zig-out"])

    # Grace period before SIGKILL after SIGTERM (seconds)
    kill_grace_period: float = 10.0

    # Directory holding pasta.yaml, or cwd when no file was found
    root: Path = field(default_factory=Path.cwd)


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest pasta.yaml by walking up from start_path.

    Returns None if no config file is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        current = current.parent

    # Check root
    candidate = current / CONFIG_FILENAME
    if candidate.is_file():
        return candidate

    return None


def _is_int(value: object) -> bool:
    # YAML true/false load as bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return _is_int(value) or isinstance(value, float)


def _parse_build(data: object, build: BuildConfig) -> None:
    if not isinstance(data, dict):
        return
    mode = data.get("mode")
    if isinstance(mode, str):
        build.set_mode(mode)
    prefix_env = data.get("prefix_env")
    if isinstance(prefix_env, str) and prefix_env:
        build.prefix_env = prefix_env
    bin_subdir = data.get("bin_subdir")
    if isinstance(bin_subdir, str):
        build.bin_subdir = bin_subdir


def _parse_datasets(data: object) -> list[Dataset] | None:
    if not isinstance(data, list):
        return None
    datasets: list[Dataset] = []
    for entry in data:
        if not isinstance(entry, dict):
            msg = f"Dataset entries must be mappings, got {entry!r}"
            raise ConfigError(msg)
        source = entry.get("input")
        if not isinstance(source, str) or not source:
            msg = f"Dataset entry is missing 'input': {entry!r}"
            raise ConfigError(msg)
        output = entry.get("output")
        if not isinstance(output, str) or not output:
            output = Path(source).stem
        rounds = entry.get("rounds")
        datasets.append(
            Dataset(
                input=source,
                output=output,
                rounds=int(rounds) if _is_int(rounds) else None,
            )
        )
    return datasets


def _parse_learn(data: object, learn: LearnDefaults) -> None:
    if not isinstance(data, dict):
        return
    rounds = data.get("rounds")
    if _is_int(rounds):
        learn.rounds = rounds
    clusters = data.get("clusters")
    if _is_int(clusters):
        learn.clusters = clusters
    max_iter = data.get("max_iter")
    if _is_int(max_iter):
        learn.max_iter = max_iter
    tol = data.get("tol")
    if _is_number(tol):
        learn.tol = float(tol)
    datasets = _parse_datasets(data.get("datasets"))
    if datasets is not None:
        learn.datasets = datasets


def load_config(config_path: Path | None = None) -> TasksConfig:
    """Load configuration from pasta.yaml or defaults.

    Looks for config in:
    1. Provided config_path
    2. Nearest pasta.yaml walking up from cwd
    3. Defaults
    """
    config = TasksConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None or not config_path.exists():
        logger.debug("No %s found, using defaults", CONFIG_FILENAME)
        return config

    logger.debug("Loading configuration from %s", config_path)
    config.root = config_path.resolve().parent

    with config_path.open() as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {config_path}: {e}"
            raise ConfigError(msg) from e

    data = cast("dict[str, object]", loaded if isinstance(loaded, dict) else {})

    _parse_build(data.get("build"), config.build)
    _parse_learn(data.get("learn"), config.learn)

    clean = data.get("clean")
    if isinstance(clean, list):
        config.clean = [str(entry) for entry in clean]

    kill_grace_period = data.get("kill_grace_period")
    if _is_number(kill_grace_period):
        config.kill_grace_period = float(kill_grace_period)

    return config
