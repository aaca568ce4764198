"""Typed configuration loading and access.

This module maps the release.toml structure onto frozen dataclasses:

    [build]
    orchestrator = "build"
    local_repository = "~/.m2/repository"

    [executor]
    max_workers = 4
    deadline_seconds = 3600

    [release]
    auto_promote = true
    require_clean_deploy = true

    [java]
    default = "17"

    [java.projects]
    commons = "17"
    cassandra = "21"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_float, get_int, get_str, get_table

__all__ = [
    "BuildConfig",
    "Config",
    "ConfigError",
    "ExecutorConfig",
    "JavaConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_ORCHESTRATOR",
]

DEFAULT_ORCHESTRATOR = "build"
DEFAULT_LOCAL_REPOSITORY = "~/.m2/repository"
DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Orchestrator project and local artifact repository."""

    orchestrator: str = DEFAULT_ORCHESTRATOR
    local_repository: str = DEFAULT_LOCAL_REPOSITORY

    @property
    def local_repository_path(self) -> Path:
        return Path(self.local_repository).expanduser()


@dataclass(frozen=True, slots=True)
class ExecutorConfig:
    """Batch dispatch tuning.

    Attributes:
        max_workers: Worker threads for any-order dispatch (1 = sequential)
        deadline_seconds: Optional budget for a whole batch
    """

    max_workers: int = DEFAULT_MAX_WORKERS
    deadline_seconds: float | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Staging promotion policy.

    Attributes:
        auto_promote: Release the staging repository at the end of
            perform_release. When False, release is a separate step.
        require_clean_deploy: Never promote when any module failed to deploy.
    """

    auto_promote: bool = True
    require_clean_deploy: bool = True


def _no_projects() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class JavaConfig:
    """Toolchain versions: a default plus per-project overrides."""

    default: str | None = None
    projects: Mapping[str, str] = field(default_factory=_no_projects)

    def version_for(self, project_key: str) -> str | None:
        return self.projects.get(project_key) or self.default


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    build: BuildConfig = field(default_factory=BuildConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    java: JavaConfig = field(default_factory=JavaConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        build: StrDict = get_table(data, "build") or {}
        executor: StrDict = get_table(data, "executor") or {}
        release: StrDict = get_table(data, "release") or {}
        java: StrDict = get_table(data, "java") or {}
        java_projects: StrDict = get_table(java, "projects") or {}

        max_workers = get_int(executor, "max_workers")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"executor.max_workers must be >= 1, got {max_workers}")

        deadline = get_float(executor, "deadline_seconds")
        if deadline is not None and deadline <= 0:
            raise ValueError(f"executor.deadline_seconds must be > 0, got {deadline}")

        projects: dict[str, str] = {}
        for key in java_projects:
            version = get_str(java_projects, key)
            if version is not None:
                projects[key] = version

        auto_promote = get_bool(release, "auto_promote")
        require_clean = get_bool(release, "require_clean_deploy")

        return cls(
            build=BuildConfig(
                orchestrator=get_str(build, "orchestrator") or DEFAULT_ORCHESTRATOR,
                local_repository=get_str(build, "local_repository") or DEFAULT_LOCAL_REPOSITORY,
            ),
            executor=ExecutorConfig(
                max_workers=max_workers or DEFAULT_MAX_WORKERS,
                deadline_seconds=deadline,
            ),
            release=ReleaseConfig(
                auto_promote=True if auto_promote is None else auto_promote,
                require_clean_deploy=True if require_clean is None else require_clean,
            ),
            java=JavaConfig(
                default=get_str(java, "default"),
                projects=MappingProxyType(projects),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data = as_str_dict(tomllib.loads(content.decode("utf-8")))
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return defaults if it is missing or invalid."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
