# tests/unit/test_plugin_manager.py
"""
Unit tests for PluginManager: discovery, compatibility, wiring of services,
listeners, themes and bundles, and clean unload/reload.
"""

import importlib
import sys

import pytest

from colorblind_theme.core.config.unified_config_manager import UnifiedConfigManager
from colorblind_theme.core.error_handling import (
    ErrorCategory,
    IncompatiblePluginError,
    PluginLoadError,
)
from colorblind_theme.plugins.plugin_manager import BUILTIN_DESCRIPTOR, PluginManager, import_object
from colorblind_theme.plugins.plugin_manifest import PluginManifest

from ..fixtures import make_external_plugin, write_json


@pytest.fixture
def plugins_dir(config_dir):
    path = config_dir / "plugins"
    path.mkdir()
    return path


@pytest.fixture
def external(plugins_dir):
    return make_external_plugin(plugins_dir)


def build_manager(config_dir, project_manager, service_registry, theme_registry, error_handler,
                  settings=None, builtin=False):
    if settings is None:
        settings = {"plugins": {"directories": ["plugins"]}}
    write_json(config_dir / "settings.json", settings)
    config = UnifiedConfigManager(base_config_dir=config_dir)
    return PluginManager(
        config, project_manager, service_registry, theme_registry,
        error_handler=error_handler,
        builtin_descriptors=None if builtin else [],
    )


@pytest.fixture
def manager(config_dir, plugins_dir, project_manager, service_registry, theme_registry, error_handler):
    plugin_manager = build_manager(config_dir, project_manager, service_registry, theme_registry, error_handler)
    yield plugin_manager
    plugin_manager.shutdown()


def plugin_module(external):
    return importlib.import_module(external["module"])


class TestImportObject:

    def test_colon_and_dotted_forms(self):
        assert import_object("colorblind_theme.plugins.plugin_manager:PluginManager") is PluginManager
        assert import_object("colorblind_theme.plugins.plugin_manager.PluginManager") is PluginManager

    @pytest.mark.parametrize("path", ["nomodule", "colorblind_theme.nope:X", "colorblind_theme.bundle:Nope"])
    def test_errors(self, path):
        with pytest.raises(PluginLoadError):
            import_object(path)


class TestDiscovery:

    def test_discovers_configured_directory(self, manager, external):
        [found] = manager.discover_plugins()
        assert found.id == "org.example.hello"
        assert found.root == external["root"]
        assert manager.list_active_plugins() == []
        assert manager.get_plugin_info("org.example.hello")["status"] == "discovered"

    def test_builtin_descriptor_by_default(self, config_dir, project_manager, service_registry,
                                           theme_registry, error_handler):
        plugin_manager = build_manager(config_dir, project_manager, service_registry, theme_registry,
                                       error_handler, settings={}, builtin=True)
        [found] = plugin_manager.discover_plugins()
        assert found.root == BUILTIN_DESCRIPTOR.parent

    def test_broken_descriptor_is_reported_and_skipped(self, manager, plugins_dir, external, error_handler):
        write_json(plugins_dir / "broken" / "plugin.json", {"id": "x"})
        assert [m.id for m in manager.discover_plugins()] == ["org.example.hello"]
        [context] = error_handler.recent_errors()
        assert context.category is ErrorCategory.PLUGIN
        assert context.operation == "discover"

    def test_missing_directory_is_skipped(self, config_dir, project_manager, service_registry,
                                          theme_registry, error_handler):
        plugin_manager = build_manager(config_dir, project_manager, service_registry, theme_registry,
                                       error_handler, settings={"plugins": {"directories": ["absent"]}})
        assert plugin_manager.discover_plugins() == []


class TestLoading:

    def test_load_wires_everything(self, manager, external, service_registry, theme_registry, project_manager):
        assert manager.load_all() == ["org.example.hello"]
        module = plugin_module(external)

        assert service_registry.is_registered(module.HelloService)
        assert "hello-contrast" in theme_registry.list_themes()
        assert len(project_manager.listeners()) == 1
        assert manager.get_bundle("org.example.hello").message("hello", "Ada") == "Hello, Ada!"
        assert str(external["root"]) in sys.path

        info = manager.get_plugin_info("org.example.hello")
        assert info["status"] == "loaded"
        assert info["themes_registered"] == ["hello-contrast"]
        assert info["listener_count"] == 1
        assert manager.health_check()["status"] == "healthy"

    def test_listener_creates_service_on_open(self, manager, external, project_manager):
        manager.load_all()
        module = plugin_module(external)
        project = project_manager.open_project("demo")
        assert module.EVENTS == [("opened", "demo")]
        assert project.get_service_if_created(module.HelloService) is module.HelloService.instances[-1]

    def test_bundle_follows_configured_locale(self, config_dir, plugins_dir, project_manager,
                                              service_registry, theme_registry, error_handler):
        make_external_plugin(plugins_dir)
        plugin_manager = build_manager(
            config_dir, project_manager, service_registry, theme_registry, error_handler,
            settings={"plugins": {"directories": ["plugins"]}, "i18n": {"locale": "de"}},
        )
        plugin_manager.load_all()
        assert plugin_manager.get_bundle("org.example.hello").message("hello", "Ada") == "Hallo, Ada!"
        plugin_manager.shutdown()

    def test_unload_restores_bundle_settings(self, config_dir, plugins_dir, project_manager,
                                             service_registry, theme_registry, error_handler):
        external = make_external_plugin(plugins_dir)
        plugin_manager = build_manager(
            config_dir, project_manager, service_registry, theme_registry, error_handler,
            settings={"plugins": {"directories": ["plugins"]},
                      "i18n": {"locale": "de", "missing_key_policy": "marker"}},
        )
        plugin_manager.load_all()
        bundle = plugin_module(external).Bundle
        assert bundle.settings()["locale"] == "de"

        plugin_manager.unload_plugin("org.example.hello")
        assert bundle.settings() == {"locale": "en", "fallback_locale": "en", "missing_key_policy": "error"}
        assert bundle.message("hello", "Ada") == "Hello, Ada!"

    def test_failed_load_restores_bundle_settings(self, config_dir, plugins_dir, project_manager,
                                                  service_registry, theme_registry, error_handler):
        external = make_external_plugin(
            plugins_dir,
            extra={"project_listeners": ["colorblind_theme.no_such_module.Listener"]},
        )
        plugin_manager = build_manager(
            config_dir, project_manager, service_registry, theme_registry, error_handler,
            settings={"plugins": {"directories": ["plugins"]}, "i18n": {"locale": "de"}},
        )
        [found] = plugin_manager.discover_plugins()
        with pytest.raises(PluginLoadError):
            plugin_manager.load_plugin(found)
        assert plugin_module(external).Bundle.locale == "en"

    def test_incompatible_plugin(self, manager, plugins_dir):
        make_external_plugin(plugins_dir, plugin_id="org.example.future", since_build="300")
        [found] = manager.discover_plugins()
        with pytest.raises(IncompatiblePluginError):
            manager.load_plugin(found)

    def test_incompatible_plugin_skipped_by_load_all(self, manager, plugins_dir, error_handler):
        make_external_plugin(plugins_dir, plugin_id="org.example.old", since_build="100", until_build="200.*")
        assert manager.load_all() == []
        assert "IncompatiblePluginError" == error_handler.recent_errors()[-1].exception_type

    def test_disabled_plugin(self, config_dir, plugins_dir, project_manager, service_registry,
                             theme_registry, error_handler):
        make_external_plugin(plugins_dir)
        plugin_manager = build_manager(
            config_dir, project_manager, service_registry, theme_registry, error_handler,
            settings={"plugins": {"directories": ["plugins"], "disabled": ["org.example.hello"]}},
        )
        assert plugin_manager.load_all() == []
        assert project_manager.listeners() == []

    def test_load_twice_returns_false(self, manager, external):
        [found] = manager.discover_plugins()
        assert manager.load_plugin(found) is True
        assert manager.load_plugin(found) is False

    def test_failed_load_leaves_nothing_behind(self, manager, plugins_dir, service_registry,
                                               theme_registry, project_manager):
        make_external_plugin(
            plugins_dir,
            plugin_id="org.example.broken",
            extra={"project_listeners": ["colorblind_theme.no_such_module.Listener"]},
        )
        [found] = manager.discover_plugins()
        with pytest.raises(PluginLoadError):
            manager.load_plugin(found)
        assert service_registry.registered_services() == []
        assert theme_registry.list_themes() == {}
        assert project_manager.listeners() == []
        assert str(found.root) not in sys.path
        assert manager.list_active_plugins() == []

    def test_duplicate_theme_fails_second_plugin(self, manager, config_dir, plugins_dir, theme_registry):
        make_external_plugin(plugins_dir / "a", plugin_id="org.example.first")
        make_external_plugin(plugins_dir / "b", plugin_id="org.example.second")
        write_json(config_dir / "settings.json", {"plugins": {"directories": ["plugins/a", "plugins/b"]}})
        manager.config.reload()
        assert manager.load_all() == ["org.example.first"]
        assert theme_registry.themes_from("org.example.first") == ["hello-contrast"]


class TestUnloading:

    def test_unload_takes_everything_apart(self, manager, external, service_registry,
                                           theme_registry, project_manager):
        manager.load_all()
        module = plugin_module(external)
        project = project_manager.open_project("demo")
        service = project.service(module.HelloService)

        assert manager.unload_plugin("org.example.hello") is True
        assert service.disposed
        assert not service_registry.is_registered(module.HelloService)
        assert theme_registry.list_themes() == {}
        assert project_manager.listeners() == []
        assert str(external["root"]) not in sys.path
        assert manager.unload_plugin("org.example.hello") is False

        project_manager.open_project("after")
        assert module.EVENTS == [("opened", "demo")]

    def test_reload_rereads_descriptor(self, manager, external):
        manager.load_all()
        descriptor = dict(external["descriptor"], version="0.2.0")
        write_json(external["root"] / "plugin.json", descriptor)
        assert manager.reload_plugin("org.example.hello") is True
        assert manager.get_plugin_info("org.example.hello")["version"] == "0.2.0"
        assert manager.list_active_plugins() == ["org.example.hello"]

    def test_reload_unknown(self, manager):
        with pytest.raises(PluginLoadError):
            manager.reload_plugin("org.example.nobody")

    def test_shutdown_unloads_all(self, manager, external, project_manager):
        manager.load_all()
        manager.shutdown()
        assert manager.list_active_plugins() == []
        assert manager.health_check()["status"] == "warning"


def test_manifest_from_dict_can_be_loaded_directly(manager, external):
    found = PluginManifest.from_file(external["root"] / "plugin.json")
    assert manager.load_plugin(found) is True
    assert manager.list_all_plugins()["org.example.hello"]["status"] == "loaded"
