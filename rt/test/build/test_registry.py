"""Tests for PluginRegistry."""

from __future__ import annotations

import pytest

from rt.build.registry import PluginRegistry
from rt.core.errors import ConfigurationError, NoPluginRegistered
from rt.model.train import BUILD, COMMONS, Project

CORE = Project("core", "Core")


class TestPluginRegistry:
    """Tests for registration and resolution."""

    def test_resolve_registered(self, plugin) -> None:
        registry = PluginRegistry.of({COMMONS: plugin})

        assert registry.resolve(COMMONS) is plugin

    def test_resolve_matches_by_key(self, plugin) -> None:
        registry = PluginRegistry.of({COMMONS: plugin})

        assert registry.resolve(Project("commons", "Spring Data Commons")) is plugin

    def test_resolve_unregistered_names_project(self, plugin) -> None:
        registry = PluginRegistry.of({COMMONS: plugin})

        with pytest.raises(NoPluginRegistered) as excinfo:
            registry.resolve(CORE)

        assert excinfo.value.project == CORE
        assert "Core" in str(excinfo.value)

    def test_not_registered_is_configuration_and_lookup_error(self) -> None:
        registry = PluginRegistry.of({})

        with pytest.raises(ConfigurationError):
            registry.resolve(BUILD)
        with pytest.raises(LookupError):
            registry.resolve(BUILD)

    def test_duplicate_registration_rejected(self, plugin) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            PluginRegistry([(COMMONS, plugin), (Project("commons", "Other"), plugin)])

    def test_none_plugin_rejected(self) -> None:
        with pytest.raises(ValueError):
            PluginRegistry([(COMMONS, None)])  # type: ignore[list-item]

    def test_get_and_contains(self, plugin) -> None:
        registry = PluginRegistry.of({BUILD: plugin, COMMONS: plugin})

        assert registry.get(BUILD) is plugin
        assert registry.get(CORE) is None
        assert COMMONS in registry
        assert CORE not in registry
        assert "commons" not in registry
        assert len(registry) == 2
        assert registry.projects() == (BUILD, COMMONS)

    def test_registration_is_a_snapshot(self, plugin) -> None:
        """Changing the source mapping later does not affect the registry."""
        plugins = {BUILD: plugin}
        registry = PluginRegistry.of(plugins)

        plugins[CORE] = plugin

        assert CORE not in registry

    def test_resolve_does_not_bind_version(self, plugin) -> None:
        registry = PluginRegistry.of({BUILD: plugin})

        assert registry.resolve(BUILD).java is None
