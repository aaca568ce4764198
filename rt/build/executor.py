"""Build executor: dispatch an operation over modules and aggregate outcomes.

For every module the executor resolves its build-system plugin, binds the
detected Java version, applies the caller's operation and records the
outcome. A failing module never stops the batch: the failure is captured in
the Summary so the operator sees every failure in one pass.

Two policies:
- run_ordered: strictly in the given (dependency) order, one module at a
  time. Later modules may read state earlier ones left behind.
- run_any_order: no ordering meaning; modules run on a thread pool and the
  summary is sorted by project key so logs are reproducible.

Only ``Exception`` subclasses are captured. KeyboardInterrupt and other
BaseExceptions propagate.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from rt.core.config import DEFAULT_MAX_WORKERS
from rt.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from rt.build.registry import PluginRegistry
    from rt.build.system import BuildSystem
    from rt.build.toolchain import JavaVersion
    from rt.model.train import Project

__all__ = [
    "BuildExecutor",
    "ExecutionResult",
    "Failure",
    "HasProject",
    "NotAttempted",
    "Summary",
]


class HasProject(Protocol):
    """Anything dispatchable: a Module or a ModuleIteration."""

    @property
    def project(self) -> Project: ...


@dataclass(frozen=True, slots=True)
class Failure:
    """A module whose plugin resolution, toolchain detection or operation raised."""

    module: HasProject
    cause: Exception

    @property
    def message(self) -> str:
        return str(self.cause) or type(self.cause).__name__

    def __str__(self) -> str:
        return f"{self.module}: {self.message}"


@dataclass(frozen=True, slots=True)
class NotAttempted:
    """A module skipped because the batch deadline passed before it started."""

    module: HasProject
    reason: str = "deadline"

    def __str__(self) -> str:
        return f"{self.module}: not attempted ({self.reason})"


type Problem = Failure | NotAttempted


@dataclass(frozen=True, slots=True)
class ExecutionResult[T]:
    """Outcome of one operation on one module: a value or a problem, never both."""

    module: HasProject
    outcome: Result[T, Problem]

    @classmethod
    def success(cls, module: HasProject, value: T) -> ExecutionResult[T]:
        return cls(module, Ok(value))

    @classmethod
    def failure(cls, module: HasProject, cause: Exception) -> ExecutionResult[T]:
        return cls(module, Err(Failure(module, cause)))

    @classmethod
    def not_attempted(cls, module: HasProject, reason: str = "deadline") -> ExecutionResult[T]:
        return cls(module, Err(NotAttempted(module, reason)))

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Ok)

    @property
    def failed(self) -> bool:
        return isinstance(self.outcome, Err) and isinstance(self.outcome.error, Failure)

    @property
    def skipped(self) -> bool:
        return isinstance(self.outcome, Err) and isinstance(self.outcome.error, NotAttempted)

    @property
    def value(self) -> T:
        """The produced value.

        Raises:
            ValueError: If the module did not succeed
        """
        match self.outcome:
            case Ok(value):
                return value
            case Err(problem):
                raise ValueError(f"No result for {problem}")

    @property
    def cause(self) -> Exception | None:
        match self.outcome:
            case Err(Failure(cause=cause)):
                return cause
            case _:
                return None

    def __str__(self) -> str:
        match self.outcome:
            case Ok(_):
                return f"{self.module}: success"
            case Err(problem):
                return str(problem)


@dataclass(frozen=True, slots=True)
class Summary[T]:
    """Ordered per-module outcomes of one batch.

    One result per module the batch was given, in processing order (input
    order for run_ordered, project key order for run_any_order).
    """

    results: tuple[ExecutionResult[T], ...]

    def __iter__(self) -> Iterator[ExecutionResult[T]]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def successes(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failures(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def is_clean(self) -> bool:
        """True if every module succeeded."""
        return all(r.succeeded for r in self.results)

    def values(self) -> list[T]:
        """Values of the successful results, in summary order."""
        return [r.value for r in self.results if r.succeeded]

    def failed_results(self) -> list[ExecutionResult[T]]:
        return [r for r in self.results if not r.succeeded]

    def __str__(self) -> str:
        counts = f"{self.successes} succeeded, {self.failures} failed"
        if self.skipped:
            counts += f", {self.skipped} not attempted"
        lines = [f"{len(self.results)} modules: {counts}"]
        for result in self.results:
            match result.outcome:
                case Ok(_):
                    lines.append(f"  OK      {result.module}")
                case Err(Failure() as failure):
                    lines.append(f"  FAILED  {result.module}: {failure.message}")
                case Err(NotAttempted(reason=reason)):
                    lines.append(f"  SKIPPED {result.module}: not attempted ({reason})")
        return "\n".join(lines)


class BuildExecutor:
    """Dispatches operations to the build system responsible for each module.

    The executor holds no state between batches beyond its collaborators.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        detector: Callable[[Project], JavaVersion],
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        deadline_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: Plugin lookup by project
            detector: Java version detection per project
            max_workers: Thread pool size for run_any_order (1 = sequential)
            deadline_seconds: Default budget for a batch, None for no limit
            clock: Monotonic time source
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._registry = registry
        self._detector = detector
        self._max_workers = max_workers
        self._deadline_seconds = deadline_seconds
        self._clock = clock

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def detect_java_version(self, project: Project) -> JavaVersion:
        return self._detector(project)

    def build_system_for(self, project: Project) -> BuildSystem:
        """Resolve the plugin for ``project`` and bind its Java version.

        Raises:
            NoPluginRegistered: If no plugin handles the project
            ToolchainNotFound: If no Java version can be determined
        """
        plugin = self._registry.resolve(project)
        return plugin.with_java_version(self.detect_java_version(project))

    def with_build_system[M: HasProject, T](
        self, module: M, operation: Callable[[BuildSystem, M], T]
    ) -> T:
        """Apply ``operation`` to a single module. Failures propagate."""
        if module is None:
            raise ValueError("Module must not be None!")
        if operation is None:
            raise ValueError("Operation must not be None!")
        return operation(self.build_system_for(module.project), module)

    def run_ordered[M: HasProject, T](
        self,
        modules: Iterable[M],
        operation: Callable[[BuildSystem, M], T],
        *,
        deadline: float | None = None,
    ) -> Summary[T]:
        """Apply ``operation`` to each module strictly in the given order.

        Every module is attempted even if an earlier one failed. Whether a
        later module is still meaningful after an earlier failure is for the
        caller to judge from the summary.

        Args:
            modules: Modules in dependency order
            operation: Called with the bound plugin and the module
            deadline: Batch budget in seconds; overrides the default

        Raises:
            ValueError: If modules is empty or operation is None
        """
        batch = self._check_batch(modules, operation)
        expires_at = self._expires_at(deadline)

        results: list[ExecutionResult[T]] = []
        for module in batch:
            if self._expired(expires_at):
                results.append(ExecutionResult.not_attempted(module))
                continue
            results.append(self._execute(module, operation))

        return Summary(tuple(results))

    def run_any_order[M: HasProject, T](
        self,
        modules: Iterable[M],
        operation: Callable[[BuildSystem, M], T],
        *,
        deadline: float | None = None,
    ) -> Summary[T]:
        """Apply ``operation`` to all modules with no ordering guarantee.

        Modules run concurrently on up to ``max_workers`` threads, each
        against its own bound plugin handle. All outcomes are joined before
        returning; the summary is sorted by project key.

        Raises:
            ValueError: If modules is empty or operation is None
        """
        batch = self._check_batch(modules, operation)
        expires_at = self._expires_at(deadline)

        def attempt(module: M) -> ExecutionResult[T]:
            if self._expired(expires_at):
                return ExecutionResult.not_attempted(module)
            return self._execute(module, operation)

        workers = min(self._max_workers, len(batch))
        if workers == 1:
            results = [attempt(module) for module in batch]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rt-build") as pool:
                results = list(pool.map(attempt, batch))

        return Summary(tuple(sorted(results, key=lambda r: r.module.project.key)))

    def _execute[M: HasProject, T](
        self, module: M, operation: Callable[[BuildSystem, M], T]
    ) -> ExecutionResult[T]:
        try:
            build_system = self.build_system_for(module.project)
            return ExecutionResult.success(module, operation(build_system, module))
        except Exception as e:
            return ExecutionResult.failure(module, e)

    def _check_batch[M](self, modules: Iterable[M], operation: object) -> tuple[M, ...]:
        if modules is None:
            raise ValueError("Modules must not be None!")
        if operation is None:
            raise ValueError("Operation must not be None!")
        batch = tuple(modules)
        if not batch:
            raise ValueError("Modules must not be empty!")
        return batch

    def _expires_at(self, deadline: float | None) -> float | None:
        budget = deadline if deadline is not None else self._deadline_seconds
        if budget is None:
            return None
        return self._clock() + budget

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and self._clock() >= expires_at
