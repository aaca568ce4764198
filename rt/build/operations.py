"""Release-process verbs composed from the executor and staging lifecycle.

BuildOperations is what a release driver calls: prepare versions, build,
deploy and promote, distribute. Batch verbs return the Summary they logged
so the driver can decide whether to continue; single-module verbs and the
preflight checks (verify, verify_staging_authentication) let failures
propagate.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from rt.build.executor import Summary
from rt.build.staging import StagingLifecycle, StagingRepository, StagingState
from rt.build.system import UpdateInformation
from rt.core.config import Config
from rt.core.errors import OperationError
from rt.model.train import BOM, BUILD, COMMONS, Project

if TYPE_CHECKING:
    from rt.build.executor import BuildExecutor
    from rt.build.registry import PluginRegistry
    from rt.build.system import BuildSystem, DeploymentInformation
    from rt.model.train import Iteration, Module, ModuleIteration, Phase, Train, TrainIteration
    from rt.output.logger import ReleaseLogger

__all__ = ["BuildOperations", "ReleaseOutcome"]


def _require(value: object, name: str) -> None:
    if value is None:
        raise ValueError(f"{name} must not be None!")


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Result of perform_release.

    Attributes:
        summary: Per-module deploy outcomes, in train order
        staging_repository: The repository used (EMPTY for non-public)
        state: Where the staging lifecycle ended
        blocked: Promotion was refused because a deploy failed
    """

    summary: Summary[DeploymentInformation]
    staging_repository: StagingRepository
    state: StagingState
    blocked: bool = False

    @property
    def deployments(self) -> list[DeploymentInformation]:
        return self.summary.values()

    @property
    def released(self) -> bool:
        return self.state is StagingState.RELEASED

    @property
    def awaiting_release(self) -> bool:
        """True if the repository is closed and a separate release step is due."""
        return self.state is StagingState.CLOSED and not self.blocked


class BuildOperations:
    """Release-process facade over the build-system plugins."""

    def __init__(
        self,
        registry: PluginRegistry,
        executor: BuildExecutor,
        logger: ReleaseLogger,
        config: Config | None = None,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._logger = logger
        self._config = config or Config()
        self._orchestrator_project = _find_project(registry, self._config.build.orchestrator)

    @property
    def orchestrator_project(self) -> Project:
        """Project whose plugin owns staging and preflight checks."""
        return self._orchestrator_project

    @property
    def local_repository(self) -> Path:
        return self._config.build.local_repository_path

    # -------------------------------------------------------------------------
    # Versions and descriptors
    # -------------------------------------------------------------------------

    def update_project_descriptors(
        self, iteration: TrainIteration, phase: Phase
    ) -> Summary[ModuleIteration]:
        """Update inter-project dependencies of all modules for ``phase``.

        Raises:
            OperationError: After logging, if any module failed. Half-updated
                descriptors leave the train inconsistent.
        """
        _require(iteration, "Train iteration")
        _require(phase, "Phase")

        information = UpdateInformation(iteration, phase)
        summary = self._executor.run_ordered(
            iteration, lambda system, module: system.update_project_descriptors(module, information)
        )

        self._logger.summary(iteration, "Update project descriptors", summary)

        if not summary.is_clean:
            failed = ", ".join(str(r.module.project) for r in summary.failed_results())
            raise OperationError(f"Updating project descriptors failed for {failed}")
        return summary

    def prepare_versions(self, iteration: TrainIteration, phase: Phase) -> Summary[ModuleIteration]:
        """Prepare the versions of all modules for ``phase``, in train order."""
        _require(iteration, "Train iteration")
        _require(phase, "Phase")

        summary = self._executor.run_ordered(
            iteration, lambda system, module: system.prepare_version(module, phase)
        )

        self._logger.summary(iteration, "Prepare versions", summary)
        return summary

    def prepare_version(self, module: ModuleIteration, phase: Phase) -> ModuleIteration:
        _require(module, "Module iteration")
        _require(phase, "Phase")

        return self._executor.with_build_system(
            module, lambda system, it: system.prepare_version(it, phase)
        )

    # -------------------------------------------------------------------------
    # Builds
    # -------------------------------------------------------------------------

    def build(self, iteration: TrainIteration) -> Summary[ModuleIteration]:
        """Local build of all modules, in train order."""
        _require(iteration, "Train iteration")

        summary = self._executor.run_ordered(iteration, _trigger_build)

        self._logger.summary(iteration, "Build", summary)
        return summary

    def trigger_build(self, module: ModuleIteration) -> ModuleIteration:
        _require(module, "Module iteration")
        return self._executor.with_build_system(module, _trigger_build)

    def build_documentation(self, iteration: TrainIteration) -> Summary[ModuleIteration]:
        """Documentation build for every module that ships reference docs."""
        _require(iteration, "Train iteration")

        modules = iteration.modules_except(BOM, COMMONS, BUILD)
        if not modules:
            self._logger.log(iteration, "Documentation build: nothing to build")
            return Summary(())

        summary = self._executor.run_ordered(
            modules, lambda system, module: system.trigger_documentation_build(module)
        )

        self._logger.summary(iteration, "Documentation build", summary)
        return summary

    def build_module_documentation(self, module: ModuleIteration) -> ModuleIteration:
        _require(module, "Module iteration")

        result = self._executor.with_build_system(
            module, lambda system, it: system.trigger_documentation_build(it)
        )

        self._logger.log(module, "Documentation build finished")
        return result

    def run_pre_release_checks(self, iteration: TrainIteration) -> Summary[ModuleIteration]:
        _require(iteration, "Train iteration")

        summary = self._executor.run_any_order(
            iteration, lambda system, module: system.trigger_pre_release_check(module)
        )

        self._logger.summary(iteration, "Pre-release checks", summary)
        return summary

    # -------------------------------------------------------------------------
    # Distribution
    # -------------------------------------------------------------------------

    def distribute_resources(self, iteration: TrainIteration) -> Summary[Module]:
        """Distribution builds for all modules of the iteration's train."""
        _require(iteration, "Train iteration")
        return self.distribute_train_resources(iteration.train)

    def distribute_train_resources(self, train: Train) -> Summary[Module]:
        _require(train, "Train")

        summary = self._executor.run_any_order(
            train, lambda system, module: system.trigger_distribution_build(module)
        )

        self._logger.summary(train, "Distribution build", summary)
        return summary

    def distribute_module_resources(self, module: ModuleIteration) -> Module:
        _require(module, "Module iteration")

        return self._executor.with_build_system(
            module, lambda system, it: system.trigger_distribution_build(it.module)
        )

    # -------------------------------------------------------------------------
    # Staging
    # -------------------------------------------------------------------------

    def open(self, module: ModuleIteration) -> StagingRepository:
        """Open a staging repository through the plugin of ``module``."""
        _require(module, "Module iteration")
        return self._executor.with_build_system(module, lambda system, _: system.open())

    def close(self, module: ModuleIteration, repository: StagingRepository) -> None:
        _require(module, "Module iteration")
        _require(repository, "Staging repository")
        if not repository.is_present:
            raise ValueError("Staging repository must be present")

        self._executor.with_build_system(module, lambda system, _: system.close(repository))

    def release(self, module: ModuleIteration, repository: StagingRepository) -> None:
        _require(module, "Module iteration")
        _require(repository, "Staging repository")

        self._executor.with_build_system(module, lambda system, _: system.release(repository))

    def open_staging_repository(self, iteration: Iteration) -> StagingRepository:
        """Open a staging repository for a public iteration, EMPTY otherwise."""
        _require(iteration, "Iteration")

        if not iteration.is_public:
            return StagingRepository.EMPTY
        return self._orchestrator().open()

    def close_staging_repository(self, repository: StagingRepository) -> None:
        _require(repository, "Staging repository")

        if repository.is_present:
            self._orchestrator().close(repository)

    def release_staging_repository(self, repository: StagingRepository) -> None:
        _require(repository, "Staging repository")

        if repository.is_present:
            self._orchestrator().release(repository)

    def smoke_tests(self, iteration: TrainIteration, repository: StagingRepository) -> None:
        """Run smoke tests for the train against ``repository``. Raises on failure."""
        _require(iteration, "Train iteration")
        _require(repository, "Staging repository")

        self._run_smoke_tests(self._orchestrator_module(iteration), iteration, repository)

    def _orchestrator_module(self, iteration: TrainIteration) -> ModuleIteration:
        try:
            return iteration.get_module(self._orchestrator_project)
        except KeyError:
            raise ValueError(
                f"Orchestrator project {self._orchestrator_project.name} is not part of {iteration}"
            ) from None

    def _run_smoke_tests(
        self, module: ModuleIteration, iteration: TrainIteration, repository: StagingRepository
    ) -> None:
        self._executor.with_build_system(
            module, lambda system, _: system.smoke_tests(iteration, repository)
        )

    # -------------------------------------------------------------------------
    # Release
    # -------------------------------------------------------------------------

    def perform_release(self, iteration: TrainIteration) -> ReleaseOutcome:
        """Build and deploy every module, then close, smoke test and promote.

        The staging repository is opened (public iterations only) before the
        first deploy and closed only after every module has been attempted.
        Promotion is skipped when a deploy failed and clean deploys are
        required, and held for a separate release_staging_repository call
        when auto-promotion is off. Failing smoke tests raise and leave the
        repository closed but unreleased.
        """
        _require(iteration, "Train iteration")
        orchestrator_module = self._orchestrator_module(iteration)

        staging = StagingLifecycle(self._orchestrator())
        repository = staging.open(iteration.iteration)
        if repository.is_present:
            self._logger.log(iteration, "Opened staging repository %s", repository)

        summary = self._executor.run_ordered(
            iteration, lambda system, module: system.deploy(module, repository)
        )

        staging.close()

        self._logger.summary(iteration, "Release", summary)

        policy = self._config.release
        if not summary.is_clean and policy.require_clean_deploy:
            self._logger.warn(
                iteration, "Not promoting staging repository %s: deploy failures", repository
            )
            return ReleaseOutcome(summary, repository, staging.state, blocked=True)

        self._run_smoke_tests(orchestrator_module, iteration, repository)

        if not policy.auto_promote:
            if repository.is_present:
                self._logger.log(
                    iteration, "Staging repository %s closed, awaiting release", repository
                )
            return ReleaseOutcome(summary, repository, staging.state)

        staging.release()
        if repository.is_present:
            self._logger.log(iteration, "Released staging repository %s", repository)

        return ReleaseOutcome(summary, repository, staging.state)

    def perform_module_release(self, module: ModuleIteration) -> DeploymentInformation:
        return self.build_and_deploy_release(module)

    def build_and_deploy_release(self, module: ModuleIteration) -> DeploymentInformation:
        """Build the release of a single module and deploy it without staging."""
        _require(module, "Module iteration")
        return self._executor.with_build_system(module, lambda system, it: system.deploy(it))

    # -------------------------------------------------------------------------
    # Preflight
    # -------------------------------------------------------------------------

    def verify(self) -> None:
        """Check the Java version and build tool for the orchestrator project."""
        self._orchestrator().verify()

    def verify_staging_authentication(self) -> None:
        self._orchestrator().verify_staging_authentication()

    def _orchestrator(self) -> BuildSystem:
        return self._executor.build_system_for(self._orchestrator_project)


def _trigger_build(system: BuildSystem, module: ModuleIteration) -> ModuleIteration:
    return system.trigger_build(module)


def _find_project(registry: PluginRegistry, key: str) -> Project:
    """Registered project for ``key``, or one named after the key itself."""
    for project in registry.projects():
        if project.key == key:
            return project
    return Project(key, key)
