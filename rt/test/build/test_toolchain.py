"""Tests for Java version parsing and detection."""

from __future__ import annotations

import threading
from types import MappingProxyType

import pytest

from rt.build.toolchain import JavaVersion, JavaVersionDetector, parse_java_version
from rt.core.config import JavaConfig
from rt.core.errors import ToolchainNotFound
from rt.core.result import Err, Ok
from rt.model.train import COMMONS, Project
from rt.platform.process import ProcessError, ProcessOutput

CORE = Project("core", "Core")

OPENJDK_17_BANNER = """openjdk version "17.0.2" 2022-01-18
OpenJDK Runtime Environment Temurin-17.0.2+8 (build 17.0.2+8)
OpenJDK 64-Bit Server VM Temurin-17.0.2+8 (build 17.0.2+8, mixed mode, sharing)
"""


class TestParseJavaVersion:
    """Tests for parse_java_version()."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("17", (17, 0, 0)),
            ("17.0.2", (17, 0, 2)),
            ("21.0.1+12", (21, 0, 1)),
            ("1.8.0_292", (8, 0, 292)),
        ],
    )
    def test_version_strings(self, text: str, expected: tuple[int, int, int]) -> None:
        version = parse_java_version(text)

        assert version is not None
        assert (version.major, version.minor, version.patch) == expected

    def test_banner(self) -> None:
        version = parse_java_version(OPENJDK_17_BANNER)

        assert version == JavaVersion(17, 0, 2)
        assert str(version) == "17.0.2"

    def test_garbage(self) -> None:
        assert parse_java_version("no java here") is None

    def test_banner_without_numeric_version(self) -> None:
        assert parse_java_version('openjdk version "internal" 2024-01-01') is None


class TestJavaVersion:
    """Tests for JavaVersion ordering."""

    def test_ordering(self) -> None:
        assert JavaVersion(8, 0, 292) < JavaVersion(11) < JavaVersion(17, 0, 2)

    def test_raw_not_compared(self) -> None:
        assert JavaVersion(17, raw="17") == JavaVersion(17, raw="17.0.0")

    def test_str_without_raw(self) -> None:
        assert str(JavaVersion(21, 0, 1)) == "21.0.1"


class TestJavaVersionDetector:
    """Tests for JavaVersionDetector."""

    def _no_probe(self, cmd: list[str], **kwargs: object):
        raise AssertionError(f"unexpected probe: {cmd}")

    def test_project_override_wins(self) -> None:
        config = JavaConfig(default="17", projects=MappingProxyType({"core": "21"}))
        detector = JavaVersionDetector(config, runner=self._no_probe)

        assert detector.detect(CORE).major == 21
        assert detector.detect(COMMONS).major == 17

    def test_invalid_configured_version(self) -> None:
        detector = JavaVersionDetector(JavaConfig(default="latest"), runner=self._no_probe)

        with pytest.raises(ToolchainNotFound, match="invalid configured version"):
            detector.detect(CORE)

    def test_probe_uses_java_home(self) -> None:
        commands: list[list[str]] = []

        def fake_run(cmd: list[str], **kwargs: object):
            commands.append(cmd)
            return Ok(ProcessOutput(stdout="", stderr=OPENJDK_17_BANNER))

        detector = JavaVersionDetector(JavaConfig(), runner=fake_run, java_home="/opt/jdk")

        assert detector.detect(CORE) == JavaVersion(17, 0, 2)
        assert commands == [["/opt/jdk/bin/java", "-version"]]

    def test_probe_failure_raises(self) -> None:
        def fake_run(cmd: list[str], **kwargs: object):
            return Err(ProcessError(tuple(cmd), -1, "", "No such file or directory"))

        detector = JavaVersionDetector(JavaConfig(), runner=fake_run, java_home="")

        with pytest.raises(ToolchainNotFound) as excinfo:
            detector.detect(CORE)

        assert excinfo.value.project == CORE
        assert "No such file" in excinfo.value.reason

    def test_unrecognized_probe_output(self) -> None:
        def fake_run(cmd: list[str], **kwargs: object):
            return Ok(ProcessOutput(stdout="hello", stderr=""))

        detector = JavaVersionDetector(JavaConfig(), runner=fake_run, java_home="")

        with pytest.raises(ToolchainNotFound, match="unrecognized"):
            detector.detect(CORE)

    def test_cached_per_project(self) -> None:
        calls: list[list[str]] = []
        lock = threading.Lock()

        def fake_run(cmd: list[str], **kwargs: object):
            with lock:
                calls.append(cmd)
            return Ok(ProcessOutput(stdout="", stderr=OPENJDK_17_BANNER))

        detector = JavaVersionDetector(JavaConfig(), runner=fake_run, java_home="")

        detector.detect(CORE)
        detector(CORE)

        assert calls == [["java", "-version"]]
