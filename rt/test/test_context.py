"""Tests for explicit component wiring."""

from __future__ import annotations

from pathlib import Path

from rt.build.toolchain import JavaVersionDetector
from rt.context import build_context
from rt.core.config import Config, ExecutorConfig
from rt.model.train import BUILD, COMMONS
from rt.output.console import MockConsole, RichConsole


class TestBuildContext:
    """Tests for build_context()."""

    def test_wires_config_into_executor(self, plugin, java17) -> None:
        config = Config(executor=ExecutorConfig(max_workers=2))

        context = build_context(
            {BUILD: plugin, COMMONS: plugin},
            config=config,
            console=MockConsole(),
            detector=lambda project: java17,  # type: ignore[arg-type]
        )

        assert context.config is config
        assert context.executor.max_workers == 2
        assert context.registry.projects() == (BUILD, COMMONS)

    def test_operations_log_to_given_console(self, plugin, java17, call_log) -> None:
        console = MockConsole()
        context = build_context(
            {BUILD: plugin},
            console=console,
            detector=lambda project: java17,  # type: ignore[arg-type]
        )

        context.operations.verify()

        assert call_log.operations() == ["verify"]
        assert context.console is console

    def test_defaults(self, plugin, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text('[java]\ndefault = "21"\n', encoding="utf-8")

        context = build_context({BUILD: plugin}, config_path=path)

        assert isinstance(context.console, RichConsole)
        assert isinstance(context.detector, JavaVersionDetector)
        assert context.config.java.default == "21"
        assert context.executor.detect_java_version(BUILD).major == 21
