"""Release train domain model."""

from .train import (
    BOM,
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
