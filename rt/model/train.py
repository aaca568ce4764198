"""Release train domain model.

A Train is an ordered set of modules; the order is build-dependency order
(a module that others depend on comes first). A TrainIteration pairs a train
with one release point (Iteration) and yields one ModuleIteration per
module, in that same order. Nothing here recomputes or validates the
dependency graph: the order given is the order used.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto

__all__ = [
    "BOM",
    "BUILD",
    "COMMONS",
    "Iteration",
    "Module",
    "ModuleIteration",
    "Phase",
    "Project",
    "Train",
    "TrainIteration",
]


@dataclass(frozen=True, slots=True)
class Project:
    """A releasable project.

    Attributes:
        key: Stable identifier used for plugin and toolchain lookup
        name: Display name
    """

    key: str
    name: str

    def __str__(self) -> str:
        return self.name


BUILD = Project("build", "Build")
BOM = Project("bom", "BOM")
COMMONS = Project("commons", "Commons")


class Phase(Enum):
    """Release phase a version preparation is performed for."""

    PREPARE = auto()
    RELEASE = auto()
    CLEANUP = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class Iteration:
    """A release point shared by all modules of a train.

    Public iterations are published through a staging repository; local ones
    are not.
    """

    name: str
    public: bool = False

    @property
    def is_public(self) -> bool:
        return self.public

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Module:
    project: Project
    version: str

    def __str__(self) -> str:
        return f"{self.project.name} {self.version}"


@dataclass(frozen=True, slots=True)
class Train:
    """Named, dependency-ordered collection of modules."""

    name: str
    modules: tuple[Module, ...]

    def __post_init__(self) -> None:
        if not self.modules:
            raise ValueError(f"Train {self.name} must contain at least one module")
        seen: set[str] = set()
        for module in self.modules:
            if module.project.key in seen:
                raise ValueError(f"Duplicate project {module.project.key} in train {self.name}")
            seen.add(module.project.key)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class ModuleIteration:
    """One module's participation in a release point."""

    module: Module
    iteration: Iteration
    train_name: str

    @property
    def project(self) -> Project:
        return self.module.project

    @property
    def version(self) -> str:
        return self.module.version

    def __str__(self) -> str:
        return f"{self.module} ({self.train_name} {self.iteration})"


@dataclass(frozen=True, slots=True)
class TrainIteration:
    """All modules of a train at one release point, in dependency order."""

    train: Train
    iteration: Iteration

    @property
    def modules(self) -> tuple[ModuleIteration, ...]:
        return tuple(ModuleIteration(m, self.iteration, self.train.name) for m in self.train)

    def __iter__(self) -> Iterator[ModuleIteration]:
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.train)

    def get_module(self, project: Project) -> ModuleIteration:
        """Return the module iteration for ``project``.

        Raises:
            KeyError: If the project is not part of the train
        """
        for module in self.modules:
            if module.project.key == project.key:
                return module
        raise KeyError(f"Project {project.name} is not part of train {self.train.name}")

    def modules_except(self, *projects: Project) -> tuple[ModuleIteration, ...]:
        """Return modules in train order, skipping the given projects."""
        excluded = {p.key for p in projects}
        return tuple(m for m in self.modules if m.project.key not in excluded)

    def __str__(self) -> str:
        return f"{self.train.name} {self.iteration.name}"
