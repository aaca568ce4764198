"""Explicit wiring of the release components.

A release driver builds one ReleaseContext at startup and passes it (or its
parts) around; there is no global registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from rt.build.executor import BuildExecutor
from rt.build.operations import BuildOperations
from rt.build.registry import PluginRegistry
from rt.build.toolchain import JavaVersionDetector
from rt.core.config import Config, load_config_or_default
from rt.output.console import ConsoleProtocol, RichConsole
from rt.output.logger import ReleaseLogger

if TYPE_CHECKING:
    from rt.build.system import BuildSystem
    from rt.model.train import Project

__all__ = ["ReleaseContext", "build_context"]


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    config: Config
    console: ConsoleProtocol
    registry: PluginRegistry
    detector: JavaVersionDetector
    executor: BuildExecutor
    operations: BuildOperations


def build_context(
    plugins: Mapping[Project, BuildSystem],
    *,
    config: Config | None = None,
    config_path: Path | None = None,
    console: ConsoleProtocol | None = None,
    detector: JavaVersionDetector | None = None,
) -> ReleaseContext:
    """Create the registry, executor and facade from configuration.

    Args:
        plugins: Build-system plugin per project, registered once
        config: Explicit configuration (wins over config_path)
        config_path: release.toml to load; defaults apply if absent
        console: Output sink, Rich by default
        detector: Java version detector, config-driven by default
    """
    if config is None:
        config = load_config_or_default(config_path) if config_path is not None else Config()
    if console is None:
        console = RichConsole()
    if detector is None:
        detector = JavaVersionDetector(config.java)

    registry = PluginRegistry.of(plugins)
    executor = BuildExecutor(
        registry,
        detector,
        max_workers=config.executor.max_workers,
        deadline_seconds=config.executor.deadline_seconds,
    )
    operations = BuildOperations(registry, executor, ReleaseLogger(console), config)

    return ReleaseContext(
        config=config,
        console=console,
        registry=registry,
        detector=detector,
        executor=executor,
        operations=operations,
    )
