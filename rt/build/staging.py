"""Staging repository value and lifecycle.

A staging repository is a temporary, promotable holding area for release
artifacts. Its lifecycle for one release is:

    ABSENT --open()--> OPEN --close()--> CLOSED --release()--> RELEASED

Non-public iterations never open one; they carry ``StagingRepository.EMPTY``
and every close/release on it is a no-op. Everything else off the path above
raises StagingStateError: in particular releasing a repository that was not
closed first never promotes anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, ClassVar

from rt.core.errors import StagingStateError

if TYPE_CHECKING:
    from rt.build.system import BuildSystem
    from rt.model.train import Iteration

__all__ = ["StagingLifecycle", "StagingRepository", "StagingState"]


@dataclass(frozen=True, slots=True)
class StagingRepository:
    """Identifier of a remote staging repository, or EMPTY.

    Attributes:
        id: Identifier assigned by the staging service, None for EMPTY
    """

    id: str | None = None

    EMPTY: ClassVar[StagingRepository]

    @property
    def is_present(self) -> bool:
        return self.id is not None

    def __str__(self) -> str:
        return self.id if self.id is not None else "<none>"


StagingRepository.EMPTY = StagingRepository()


class StagingState(Enum):
    ABSENT = auto()
    OPEN = auto()
    CLOSED = auto()
    RELEASED = auto()

    def __str__(self) -> str:
        return self.name.lower()


class StagingLifecycle:
    """Drives one staging repository through its states.

    Remote calls go through the orchestrator plugin (already bound to its
    toolchain version). One lifecycle per release operation.
    """

    def __init__(self, orchestrator: BuildSystem) -> None:
        self._orchestrator = orchestrator
        self._repository = StagingRepository.EMPTY
        self._state = StagingState.ABSENT
        self._opened = False

    @property
    def repository(self) -> StagingRepository:
        return self._repository

    @property
    def state(self) -> StagingState:
        return self._state

    def open(self, iteration: Iteration) -> StagingRepository:
        """Open a repository for a public iteration.

        Non-public iterations perform no remote call and yield EMPTY.
        """
        if self._opened:
            raise StagingStateError(f"Staging repository already opened ({self._state})")
        self._opened = True

        if not iteration.is_public:
            return StagingRepository.EMPTY

        repository = self._orchestrator.open()
        if not repository.is_present:
            raise StagingStateError(f"Opening staging for {iteration} returned no repository")

        self._repository = repository
        self._state = StagingState.OPEN
        return repository

    def close(self) -> None:
        """Seal the repository against further uploads."""
        match self._state:
            case StagingState.ABSENT:
                return
            case StagingState.OPEN:
                self._orchestrator.close(self._repository)
                self._state = StagingState.CLOSED
            case _:
                raise StagingStateError(
                    f"Cannot close staging repository {self._repository}: already {self._state}"
                )

    def release(self) -> None:
        """Promote a closed repository. Terminal."""
        match self._state:
            case StagingState.ABSENT:
                return
            case StagingState.CLOSED:
                self._orchestrator.release(self._repository)
                self._state = StagingState.RELEASED
            case _:
                raise StagingStateError(
                    f"Cannot release staging repository {self._repository}: it is {self._state}, "
                    "expected closed"
                )
