"""Exception taxonomy for release coordination.

Collaborators (build-system plugins, toolchain detection) signal failure by
raising. Batch dispatch captures these per module; single-module preflight
checks let them propagate.

- ConfigurationError: the environment is not set up for a project
  (no plugin registered, no toolchain found).
- OperationError: a plugin failed while performing a concrete step.
- StagingStateError: a staging repository transition that is not allowed
  from its current state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rt.model.train import Project

__all__ = [
    "ConfigurationError",
    "NoPluginRegistered",
    "OperationError",
    "ReleaseError",
    "StagingStateError",
    "ToolchainNotFound",
]


class ReleaseError(Exception):
    """Base class for all release coordination errors."""


class ConfigurationError(ReleaseError):
    """The environment is misconfigured for a given project."""


class NoPluginRegistered(ConfigurationError, LookupError):
    """No build-system plugin is registered for a project."""

    def __init__(self, project: Project) -> None:
        super().__init__(f"No build system plugin found for project {project.name}!")
        self.project = project


class ToolchainNotFound(ConfigurationError):
    """No usable Java toolchain version could be determined for a project."""

    def __init__(self, project: Project, reason: str) -> None:
        super().__init__(f"Cannot detect Java version for {project.name}: {reason}")
        self.project = project
        self.reason = reason


class OperationError(ReleaseError):
    """A build-system plugin failed while performing a step."""


class StagingStateError(ReleaseError):
    """Illegal staging repository transition."""
