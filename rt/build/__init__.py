"""Build-system dispatch: plugins, toolchains, executor and staging.

The BuildOperations facade lives in ``rt.build.operations`` and is not
re-exported here, since it depends on the output layer.
"""

from .executor import BuildExecutor, ExecutionResult, Failure, NotAttempted, Summary
from .registry import PluginRegistry
from .staging import StagingLifecycle, StagingRepository, StagingState
from .system import BuildSystem, DeploymentInformation, UpdateInformation
from .toolchain import JavaVersion, JavaVersionDetector, parse_java_version

__all__ = [
    # executor
    "BuildExecutor",
    "ExecutionResult",
    "Failure",
    "NotAttempted",
    "Summary",
    # registry
    "PluginRegistry",
    # staging
    "StagingLifecycle",
    "StagingRepository",
    "StagingState",
    # system
    "BuildSystem",
    "DeploymentInformation",
    "UpdateInformation",
    # toolchain
    "JavaVersion",
    "JavaVersionDetector",
    "parse_java_version",
]
