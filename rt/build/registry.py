"""Build-system plugin registry.

Maps a project key to the one build-system plugin responsible for it. The
registry is populated once at startup and is read-only afterwards.

Usage:
    registry = PluginRegistry.of({BUILD: maven, COMMONS: maven, CORE: maven})
    plugin = registry.resolve(COMMONS)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from rt.core.errors import NoPluginRegistered

if TYPE_CHECKING:
    from rt.build.system import BuildSystem
    from rt.model.train import Project

__all__ = ["PluginRegistry"]


class PluginRegistry:
    """Read-only lookup from project to build-system plugin.

    Resolution is a pure lookup; it does not bind a toolchain version. Callers
    bind the resolved plugin with ``with_java_version`` before use.
    """

    def __init__(self, plugins: Iterable[tuple[Project, BuildSystem]]) -> None:
        """Initialize the registry.

        Args:
            plugins: (project, plugin) pairs; each project at most once

        Raises:
            ValueError: If a project is registered twice
        """
        projects: dict[str, Project] = {}
        entries: dict[str, BuildSystem] = {}
        for project, plugin in plugins:
            if project is None or plugin is None:
                raise ValueError("Project and plugin must not be None")
            if project.key in entries:
                raise ValueError(f"Duplicate build system plugin for project {project.name}")
            projects[project.key] = project
            entries[project.key] = plugin

        self._projects = MappingProxyType(projects)
        self._plugins = MappingProxyType(entries)

    @classmethod
    def of(cls, plugins: Mapping[Project, BuildSystem]) -> PluginRegistry:
        return cls(plugins.items())

    def resolve(self, project: Project) -> BuildSystem:
        """Get the plugin for ``project``.

        Raises:
            NoPluginRegistered: If no plugin is registered for it
        """
        plugin = self._plugins.get(project.key)
        if plugin is None:
            raise NoPluginRegistered(project)
        return plugin

    def get(self, project: Project) -> BuildSystem | None:
        return self._plugins.get(project.key)

    def projects(self) -> tuple[Project, ...]:
        return tuple(self._projects.values())

    def __contains__(self, project: object) -> bool:
        key = getattr(project, "key", None)
        return key is not None and key in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)
