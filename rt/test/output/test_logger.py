"""Tests for release progress logging."""

from __future__ import annotations

from rt.build.executor import ExecutionResult, Summary
from rt.core.errors import OperationError
from rt.model.train import BUILD, COMMONS, Module, Project
from rt.output.console import MockConsole, Style
from rt.output.logger import ReleaseLogger, print_summary

CORE = Project("core", "Core")


def _summary() -> Summary[str]:
    return Summary(
        (
            ExecutionResult.success(Module(BUILD, "3.0.0"), "ok"),
            ExecutionResult.failure(Module(COMMONS, "3.0.0"), OperationError("compile error")),
            ExecutionResult.not_attempted(Module(CORE, "3.0.0")),
        )
    )


class TestReleaseLogger:
    """Tests for ReleaseLogger."""

    def test_log_is_tagged_with_context(self, console: MockConsole, logger: ReleaseLogger) -> None:
        logger.log("Moore GA", "Opened staging repository %s", "orgspring-1001")

        assert console.messages == ["info: Moore GA: Opened staging repository orgspring-1001"]

    def test_template_without_args_is_not_formatted(
        self, console: MockConsole, logger: ReleaseLogger
    ) -> None:
        logger.log("Moore", "100% done")

        assert console.messages == ["info: Moore: 100% done"]

    def test_warn(self, console: MockConsole, logger: ReleaseLogger) -> None:
        logger.warn("Moore GA", "careful")

        assert console.outputs[0].style == Style.WARNING
        assert console.messages == ["warning: Moore GA: careful"]

    def test_summary_headline_and_lines(self, console: MockConsole, logger: ReleaseLogger) -> None:
        logger.summary("Moore GA", "Build", _summary())

        assert console.messages == [
            "info: Moore GA: Build: 1 succeeded, 1 failed, 1 not attempted",
            "OK Build 3.0.0",
            "error: Commons 3.0.0: compile error",
            "Core 3.0.0: not attempted (deadline)",
        ]
        assert console.outputs[-1].style == Style.WARNING


class TestPrintSummary:
    """Tests for print_summary()."""

    def test_clean_summary(self) -> None:
        console = MockConsole()
        summary = Summary((ExecutionResult.success(Module(BUILD, "3.0.0"), 1),))

        print_summary(summary, console)

        assert console.messages == ["OK Build 3.0.0"]

    def test_failure_without_message_uses_type_name(self) -> None:
        console = MockConsole()
        summary = Summary((ExecutionResult.failure(Module(BUILD, "3.0.0"), RuntimeError()),))

        print_summary(summary, console)

        assert console.messages == ["error: Build 3.0.0: RuntimeError"]
