"""Java toolchain version detection.

Every module is built with a specific Java version. The detector answers
"which version for this project" from configuration first (per-project
override, then the configured default) and falls back to probing the
installed JDK with ``java -version``. ``JAVA_HOME`` wins over ``PATH`` for
the probe, as the shell activation scripts set it.
"""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import total_ordering
from pathlib import Path
from typing import TYPE_CHECKING

from rt.core.errors import ToolchainNotFound
from rt.core.result import Err, Result
from rt.platform.process import ProcessError, ProcessOutput, run

if TYPE_CHECKING:
    from rt.core.config import JavaConfig
    from rt.model.train import Project

__all__ = ["JavaVersion", "JavaVersionDetector", "parse_java_version"]

_PROBE_TIMEOUT_SECONDS = 30.0

# openjdk version "17.0.2" 2022-01-18
_BANNER_RE = re.compile(r'version\s+"([^"]+)"')
# 17 / 17.0.2 / 21.0.1+12 / 1.8.0_292
_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[_+.-](\d+))?")

type CommandRunner = Callable[..., Result[ProcessOutput, ProcessError]]


@total_ordering
@dataclass(frozen=True, slots=True)
class JavaVersion:
    """A Java feature release, e.g. 17.0.2.

    Legacy ``1.x`` numbering is normalized: ``1.8.0_292`` becomes major 8,
    update 292.
    """

    major: int
    minor: int = 0
    patch: int = 0
    raw: str = field(default="", compare=False)

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, JavaVersion):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        return self.raw or f"{self.major}.{self.minor}.{self.patch}"


def parse_java_version(text: str) -> JavaVersion | None:
    """Parse a version string or a ``java -version`` banner.

    Returns None if no version can be found.
    """
    banner = _BANNER_RE.search(text)
    candidate = (banner.group(1) if banner else text).strip()

    match = _VERSION_RE.match(candidate)
    if not match:
        return None

    first, second, third, extra = (int(g) if g is not None else None for g in match.groups())
    if first is None:
        return None

    if first == 1 and second is not None:
        # 1.8.0_292 -> 8.0.292
        return JavaVersion(major=second, minor=third or 0, patch=extra or 0, raw=candidate)

    return JavaVersion(major=first, minor=second or 0, patch=third or 0, raw=candidate)


class JavaVersionDetector:
    """Determines the Java version a project must be built with.

    Detected versions are cached per project; the detector is safe to share
    between worker threads.
    """

    def __init__(
        self,
        config: JavaConfig,
        *,
        runner: CommandRunner = run,
        java_home: str | None = None,
    ) -> None:
        self._config = config
        self._runner = runner
        self._java_home = java_home if java_home is not None else os.environ.get("JAVA_HOME")
        self._cache: dict[str, JavaVersion] = {}
        self._lock = threading.Lock()

    def detect(self, project: Project) -> JavaVersion:
        """Return the Java version for ``project``.

        Raises:
            ToolchainNotFound: If neither configuration nor the installed JDK
                yields a version
        """
        with self._lock:
            cached = self._cache.get(project.key)
        if cached is not None:
            return cached

        version = self._from_config(project)
        if version is None:
            version = self._probe(project)

        with self._lock:
            self._cache[project.key] = version
        return version

    def __call__(self, project: Project) -> JavaVersion:
        return self.detect(project)

    def _from_config(self, project: Project) -> JavaVersion | None:
        configured = self._config.version_for(project.key)
        if configured is None:
            return None
        version = parse_java_version(configured)
        if version is None:
            raise ToolchainNotFound(project, f"invalid configured version '{configured}'")
        return version

    def _java_binary(self) -> str:
        if self._java_home:
            return str(Path(self._java_home) / "bin" / "java")
        return "java"

    def _probe(self, project: Project) -> JavaVersion:
        result = self._runner([self._java_binary(), "-version"], timeout=_PROBE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            raise ToolchainNotFound(project, str(result.error))

        version = parse_java_version(result.value.combined)
        if version is None:
            raise ToolchainNotFound(project, "unrecognized `java -version` output")
        return version
