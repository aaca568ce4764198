"""Build-system plugin contract.

A BuildSystem performs the concrete release steps for one project (edit
descriptors, build, deploy, ...). Implementations live outside this
package; the executor only depends on this protocol.

Handles are value-like: ``with_java_version`` returns a new, bound handle
and never mutates the receiver, so one registered plugin can be bound
concurrently for several modules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from rt.build.staging import StagingRepository

if TYPE_CHECKING:
    from rt.build.toolchain import JavaVersion
    from rt.model.train import Module, ModuleIteration, Phase, TrainIteration

__all__ = ["BuildSystem", "DeploymentInformation", "UpdateInformation"]


@dataclass(frozen=True, slots=True)
class UpdateInformation:
    """What a descriptor update needs: the release point and the phase."""

    train_iteration: TrainIteration
    phase: Phase


@dataclass(frozen=True, slots=True)
class DeploymentInformation:
    """Where a module's artifacts went.

    Attributes:
        module: The deployed module iteration
        staging_repository: Repository the artifacts were uploaded into
        target: Target repository name or URL reported by the plugin
    """

    module: ModuleIteration
    staging_repository: StagingRepository
    target: str


class BuildSystem(Protocol):
    """Operations a build-system plugin provides for one project."""

    def with_java_version(self, version: JavaVersion) -> BuildSystem:
        """Return a handle bound to ``version``; the receiver is unchanged."""
        ...

    def prepare_version(self, module: ModuleIteration, phase: Phase) -> ModuleIteration: ...

    def update_project_descriptors(
        self, module: ModuleIteration, information: UpdateInformation
    ) -> ModuleIteration: ...

    def trigger_build(self, module: ModuleIteration) -> ModuleIteration: ...

    def trigger_documentation_build(self, module: ModuleIteration) -> ModuleIteration: ...

    def trigger_distribution_build(self, module: Module) -> Module: ...

    def trigger_pre_release_check(self, module: ModuleIteration) -> ModuleIteration: ...

    def open(self) -> StagingRepository:
        """Create a remote staging repository."""
        ...

    def close(self, repository: StagingRepository) -> None: ...

    def release(self, repository: StagingRepository) -> None: ...

    def deploy(
        self,
        module: ModuleIteration,
        repository: StagingRepository = StagingRepository.EMPTY,
    ) -> DeploymentInformation: ...

    def smoke_tests(self, iteration: TrainIteration, repository: StagingRepository) -> None: ...

    def verify(self) -> None:
        """Check the toolchain and build tool are usable. Raises on failure."""
        ...

    def verify_staging_authentication(self) -> None:
        """Check credentials for the staging service. Raises on failure."""
        ...
