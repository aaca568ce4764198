"""Release progress logging.

Every message is tagged with the context it concerns (a train, a train
iteration or a single module), e.g. ``Moore GA: Prepare versions: ...``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rt.build.executor import Failure, NotAttempted
from rt.core.result import Err, Ok
from rt.output.console import Style

if TYPE_CHECKING:
    from rt.build.executor import Summary
    from rt.output.console import ConsoleProtocol

__all__ = ["ReleaseLogger", "print_summary"]


def _format(template: str, args: tuple[object, ...]) -> str:
    return template % args if args else template


class ReleaseLogger:
    """Context-tagged logging onto a console."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    @property
    def console(self) -> ConsoleProtocol:
        return self._console

    def log(self, context: object, template: str, *args: object) -> None:
        self._console.info(f"{context}: {_format(template, args)}")

    def warn(self, context: object, template: str, *args: object) -> None:
        self._console.warning(f"{context}: {_format(template, args)}")

    def summary(self, context: object, title: str, summary: Summary[object]) -> None:
        """Log a batch headline followed by one styled line per module."""
        counts = f"{summary.successes} succeeded, {summary.failures} failed"
        if summary.skipped:
            counts += f", {summary.skipped} not attempted"
        self.log(context, "%s: %s", title, counts)
        print_summary(summary, self._console)


def print_summary(summary: Summary[object], console: ConsoleProtocol) -> None:
    """Print each module outcome with its style."""
    for result in summary:
        match result.outcome:
            case Ok(_):
                console.success(str(result.module))
            case Err(Failure() as failure):
                console.error(f"{result.module}: {failure.message}")
            case Err(NotAttempted(reason=reason)):
                console.print(f"{result.module}: not attempted ({reason})", Style.WARNING)
