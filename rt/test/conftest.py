"""Shared fixtures: a recording build-system plugin and a small release train."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

import pytest

from rt.build.executor import BuildExecutor
from rt.build.registry import PluginRegistry
from rt.build.staging import StagingRepository
from rt.build.system import DeploymentInformation, UpdateInformation
from rt.build.toolchain import JavaVersion
from rt.model.train import (
    BUILD,
    COMMONS,
    Iteration,
    Module,
    ModuleIteration,
    Phase,
    Project,
    Train,
    TrainIteration,
)
from rt.output.console import MockConsole
from rt.output.logger import ReleaseLogger

CORE = Project("core", "Core")


@dataclass(frozen=True, slots=True)
class Call:
    operation: str
    target: str
    java: str | None


@dataclass
class CallLog:
    """Thread-safe record of every plugin call, shared by all bound handles."""

    calls: list[Call] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, call: Call) -> None:
        with self.lock:
            self.calls.append(call)

    def operations(self) -> list[str]:
        return [c.operation for c in self.calls]

    def targets(self, operation: str) -> list[str]:
        return [c.target for c in self.calls if c.operation == operation]


class FakeBuildSystem:
    """In-memory BuildSystem that records calls and raises on demand."""

    def __init__(
        self,
        log: CallLog,
        *,
        failures: dict[tuple[str, str], Exception] | None = None,
        java: JavaVersion | None = None,
        staging_id: str = "orgspring-1001",
    ) -> None:
        self.log = log
        self.failures = failures if failures is not None else {}
        self.java = java
        self.staging_id = staging_id

    def fail_on(self, operation: str, target: str, error: Exception) -> None:
        self.failures[(operation, target)] = error

    def with_java_version(self, version: JavaVersion) -> FakeBuildSystem:
        return FakeBuildSystem(
            self.log, failures=self.failures, java=version, staging_id=self.staging_id
        )

    def _record(self, operation: str, target: str) -> None:
        self.log.add(Call(operation, target, str(self.java) if self.java else None))
        error = self.failures.get((operation, target))
        if error is not None:
            raise error

    def prepare_version(self, module: ModuleIteration, phase: Phase) -> ModuleIteration:
        self._record("prepare_version", module.project.key)
        return module

    def update_project_descriptors(
        self, module: ModuleIteration, information: UpdateInformation
    ) -> ModuleIteration:
        self._record("update_project_descriptors", module.project.key)
        return module

    def trigger_build(self, module: ModuleIteration) -> ModuleIteration:
        self._record("trigger_build", module.project.key)
        return module

    def trigger_documentation_build(self, module: ModuleIteration) -> ModuleIteration:
        self._record("trigger_documentation_build", module.project.key)
        return module

    def trigger_distribution_build(self, module: Module) -> Module:
        self._record("trigger_distribution_build", module.project.key)
        return module

    def trigger_pre_release_check(self, module: ModuleIteration) -> ModuleIteration:
        self._record("trigger_pre_release_check", module.project.key)
        return module

    def open(self) -> StagingRepository:
        self._record("open", self.staging_id)
        return StagingRepository(self.staging_id)

    def close(self, repository: StagingRepository) -> None:
        self._record("close", str(repository))

    def release(self, repository: StagingRepository) -> None:
        self._record("release", str(repository))

    def deploy(
        self,
        module: ModuleIteration,
        repository: StagingRepository = StagingRepository.EMPTY,
    ) -> DeploymentInformation:
        self._record("deploy", f"{module.project.key}@{repository}")
        return DeploymentInformation(module, repository, target="libs-release")

    def smoke_tests(self, iteration: TrainIteration, repository: StagingRepository) -> None:
        self._record("smoke_tests", str(repository))

    def verify(self) -> None:
        self._record("verify", "build")

    def verify_staging_authentication(self) -> None:
        self._record("verify_staging_authentication", "build")


def make_train_iteration(
    *, public: bool, projects: tuple[Project, ...] = (BUILD, COMMONS, CORE)
) -> TrainIteration:
    train = Train("Moore", tuple(Module(p, "3.0.0") for p in projects))
    return TrainIteration(train, Iteration("GA" if public else "M1", public=public))


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def plugin(call_log: CallLog) -> FakeBuildSystem:
    return FakeBuildSystem(call_log)


@pytest.fixture
def registry(plugin: FakeBuildSystem) -> PluginRegistry:
    return PluginRegistry.of({BUILD: plugin, COMMONS: plugin, CORE: plugin})


@pytest.fixture
def java17() -> JavaVersion:
    return JavaVersion(17, raw="17")


@pytest.fixture
def executor(registry: PluginRegistry, java17: JavaVersion) -> BuildExecutor:
    return BuildExecutor(registry, lambda project: java17, max_workers=4)


@pytest.fixture
def public_iteration() -> TrainIteration:
    return make_train_iteration(public=True)


@pytest.fixture
def local_iteration() -> TrainIteration:
    return make_train_iteration(public=False)


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def logger(console: MockConsole) -> ReleaseLogger:
    return ReleaseLogger(console)


@pytest.fixture
def train_factory():
    """Build a train iteration over the given projects (default: build, commons, core)."""
    return make_train_iteration
