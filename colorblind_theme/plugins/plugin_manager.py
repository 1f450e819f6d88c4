# colorblind_theme/plugins/plugin_manager.py
"""
Plugin Manager

Responsible for:
- Discovering plugin descriptors (the builtin one plus configured directories)
- Checking host build compatibility
- Wiring declared project services, project listeners, themes and the
  message bundle into the host
- Running the optional entry point's lifecycle
- Unloading and reloading plugins without a restart

A plugin's message bundle is a module-level object, shared by every host
in the process. Loading configures it from this host's i18n settings and
unloading puts back the settings it had before.
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config.unified_config_manager import UnifiedConfigManager
from ..core.dependency.project_service_registry import ProjectServiceRegistry
from ..core.error_handling import (
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    IncompatiblePluginError,
    PluginLoadError,
)
from ..core.i18n.message_bundle import MessageBundle
from ..core.project.project_manager import ProjectManager, Subscription
from ..core.themes.theme_registry import ThemeRegistry
from .base_plugin import BasePlugin, PluginContext
from .plugin_manifest import PluginManifest

BUILTIN_DESCRIPTOR = Path(__file__).resolve().parent.parent / "resources" / "plugin.json"
DESCRIPTOR_NAME = "plugin.json"


def import_object(path: str) -> Any:
    """Import 'package.module:attr' or 'package.module.attr'."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise PluginLoadError(f"Invalid object path: {path}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PluginLoadError(f"Cannot import module '{module_name}': {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise PluginLoadError(f"Module '{module_name}' has no attribute '{attr}'") from e


class _LoadedPlugin:
    """Everything the host wired for one plugin, so it can be taken apart again."""

    def __init__(self, manifest: PluginManifest):
        self.manifest = manifest
        self.subscriptions: List[Subscription] = []
        self.service_types: List[type] = []
        self.theme_ids: List[str] = []
        self.bundle: Optional[MessageBundle] = None
        self.bundle_settings: Optional[Dict[str, str]] = None
        self.entry: Optional[BasePlugin] = None
        self.sys_path_entry: Optional[str] = None


class PluginManager:
    """
    Host-side plugin lifecycle: discover, load, unload, reload.
    """

    def __init__(
        self,
        config: UnifiedConfigManager,
        project_manager: ProjectManager,
        project_services: ProjectServiceRegistry,
        themes: ThemeRegistry,
        error_handler: Optional[ErrorHandler] = None,
        builtin_descriptors: Optional[List[Path]] = None,
    ):
        self.config = config
        self.project_manager = project_manager
        self.project_services = project_services
        self.themes = themes
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logging.getLogger("PluginManager")

        self._builtin_descriptors = (
            list(builtin_descriptors) if builtin_descriptors is not None else [BUILTIN_DESCRIPTOR]
        )
        self._discovered: Dict[str, PluginManifest] = {}
        self._loaded: Dict[str, _LoadedPlugin] = {}

    @property
    def host_build(self) -> str:
        return str(self.config.get("host.build"))

    def _plugin_directories(self) -> List[Path]:
        directories = []
        for entry in self.config.get("plugins.directories", []):
            path = Path(entry)
            if not path.is_absolute():
                path = self.config.config_dir / path
            directories.append(path)
        return directories

    def discover_plugins(self) -> List[PluginManifest]:
        """
        Read every descriptor that can be found. Does NOT load anything.
        Broken descriptors are reported and skipped.
        """
        descriptor_paths = list(self._builtin_descriptors)
        for directory in self._plugin_directories():
            if not directory.is_dir():
                self.logger.warning(f"Plugin directory missing: {directory}")
                continue
            if (directory / DESCRIPTOR_NAME).exists():
                descriptor_paths.append(directory / DESCRIPTOR_NAME)
            descriptor_paths.extend(sorted(directory.glob(f"*/{DESCRIPTOR_NAME}")))

        manifests = []
        for path in descriptor_paths:
            try:
                manifest = PluginManifest.from_file(path)
            except PluginLoadError as e:
                self._report(e, "discover", str(path))
                continue
            if manifest.id in self._discovered and self._discovered[manifest.id].root != manifest.root:
                self.logger.warning(f"Duplicate plugin id '{manifest.id}' at {path}; keeping the first one")
                continue
            self._discovered[manifest.id] = manifest
            manifests.append(manifest)

        self.logger.info(f"Discovered {len(manifests)} plugin(s).")
        return manifests

    def load_all(self) -> List[str]:
        """Discover and load every plugin; failures are reported and skipped."""
        loaded = []
        for manifest in self.discover_plugins():
            if manifest.id in self._loaded:
                continue
            try:
                if self.load_plugin(manifest):
                    loaded.append(manifest.id)
            except PluginLoadError as e:
                self._report(e, "load", manifest.id)
        return loaded

    def load_plugin(self, manifest: PluginManifest) -> bool:
        """
        Wire a plugin into the host.

        Returns False if the plugin is disabled or already loaded.
        Raises IncompatiblePluginError or PluginLoadError otherwise; a failed
        load leaves nothing of the plugin behind.
        """
        if manifest.id in self.config.get("plugins.disabled", []):
            self.logger.info(f"Plugin {manifest.id} is disabled by configuration.")
            return False

        if manifest.id in self._loaded:
            self.logger.warning(f"Plugin {manifest.id} already loaded.")
            return False

        if not manifest.is_compatible(self.host_build):
            raise IncompatiblePluginError(
                f"Plugin '{manifest.id}' supports builds {manifest.since_build}"
                f"..{manifest.until_build or '*'}, host is {self.host_build}"
            )

        self._discovered.setdefault(manifest.id, manifest)
        record = _LoadedPlugin(manifest)
        try:
            self._wire(record)
        except Exception as e:
            self._unwire(record)
            if isinstance(e, PluginLoadError):
                raise
            raise PluginLoadError(f"Plugin registration failed: {manifest.id}: {e}") from e

        self._loaded[manifest.id] = record
        self.logger.info(f"🔌 Plugin loaded: {manifest.name} ({manifest.id} v{manifest.version})")
        return True

    def _wire(self, record: _LoadedPlugin) -> None:
        manifest = record.manifest

        if manifest.root is not None and manifest.root != BUILTIN_DESCRIPTOR.parent:
            root = str(manifest.root)
            if root not in sys.path:
                sys.path.insert(0, root)
                record.sys_path_entry = root

        if manifest.resource_bundle:
            bundle = import_object(manifest.resource_bundle)
            if not isinstance(bundle, MessageBundle):
                raise PluginLoadError(f"{manifest.resource_bundle} is not a MessageBundle")
            record.bundle = bundle
            record.bundle_settings = bundle.settings()
            bundle.configure(
                locale=self.config.get("i18n.locale"),
                fallback_locale=self.config.get("i18n.fallback_locale"),
                missing_key_policy=self.config.get("i18n.missing_key_policy"),
            )

        # services first: listeners may request them as soon as they are subscribed
        for declaration in manifest.project_services:
            implementation = import_object(declaration.implementation)
            interface = import_object(declaration.interface) if declaration.interface else implementation
            self.project_services.register(interface, factory=implementation, plugin_id=manifest.id)
            record.service_types.append(interface)

        for relative in manifest.themes:
            theme = self.themes.load_theme_file(manifest.resolve_path(relative))
            record.theme_ids.append(self.themes.register(theme, source=manifest.id))

        if manifest.entry_point:
            entry_class = import_object(manifest.entry_point)
            if not (isinstance(entry_class, type) and issubclass(entry_class, BasePlugin)):
                raise PluginLoadError(f"{manifest.entry_point} is not a BasePlugin subclass")
            entry = entry_class(manifest.id)
            record.entry = entry
            if not entry.initialize(self._build_context(manifest)):
                raise PluginLoadError(f"Plugin '{manifest.id}' entry point refused to initialize")
            entry.on_load()

        for listener_path in manifest.project_listeners:
            listener_class = import_object(listener_path)
            record.subscriptions.append(self.project_manager.subscribe(listener_class()))

    def _unwire(self, record: _LoadedPlugin) -> None:
        for subscription in record.subscriptions:
            subscription.dispose()
        record.subscriptions.clear()

        if record.entry is not None and record.entry.initialized:
            record.entry.on_unload()
            record.entry.shutdown()
        record.entry = None

        for service_type in record.service_types:
            self.project_services.unregister(service_type)
        record.service_types.clear()

        for theme_id in record.theme_ids:
            self.themes.unregister(theme_id)
        record.theme_ids.clear()

        if record.bundle is not None and record.bundle_settings is not None:
            record.bundle.configure(**record.bundle_settings)
        record.bundle = None
        record.bundle_settings = None

        if record.sys_path_entry and record.sys_path_entry in sys.path:
            sys.path.remove(record.sys_path_entry)
        record.sys_path_entry = None

    def _build_context(self, manifest: PluginManifest) -> PluginContext:
        return PluginContext(
            manifest=manifest,
            plugin_root=manifest.root or BUILTIN_DESCRIPTOR.parent,
            config=self.config,
            project_manager=self.project_manager,
            project_services=self.project_services,
            themes=self.themes,
            error_handler=self.error_handler,
            logger=logging.getLogger(f"Plugin.{manifest.id}"),
        )

    def unload_plugin(self, plugin_id: str) -> bool:
        """Take a loaded plugin apart. Created project services are disposed."""
        record = self._loaded.pop(plugin_id, None)
        if record is None:
            self.logger.warning(f"Plugin {plugin_id} not loaded.")
            return False
        self._unwire(record)
        self.logger.info(f"Plugin unloaded: {plugin_id}")
        return True

    def reload_plugin(self, plugin_id: str) -> bool:
        """Unload and load again, re-reading the descriptor from disk."""
        record = self._loaded.get(plugin_id)
        manifest = record.manifest if record else self._discovered.get(plugin_id)
        if manifest is None:
            raise PluginLoadError(f"Plugin '{plugin_id}' not found.")
        self.logger.info(f"🔄 Reloading plugin: {plugin_id}")
        if manifest.root is not None and (manifest.root / DESCRIPTOR_NAME).exists():
            manifest = PluginManifest.from_file(manifest.root / DESCRIPTOR_NAME)
        self.unload_plugin(plugin_id)
        return self.load_plugin(manifest)

    def get_plugin(self, plugin_id: str) -> Optional[BasePlugin]:
        record = self._loaded.get(plugin_id)
        return record.entry if record else None

    def get_bundle(self, plugin_id: str) -> Optional[MessageBundle]:
        record = self._loaded.get(plugin_id)
        return record.bundle if record else None

    def get_plugin_info(self, plugin_id: str) -> Optional[Dict[str, Any]]:
        record = self._loaded.get(plugin_id)
        manifest = record.manifest if record else self._discovered.get(plugin_id)
        if manifest is None:
            return None
        info = manifest.to_dict()
        info["status"] = "loaded" if record else "discovered"
        if record:
            info["themes_registered"] = list(record.theme_ids)
            info["listener_count"] = len(record.subscriptions)
        return info

    def list_active_plugins(self) -> List[str]:
        return sorted(self._loaded)

    def list_all_plugins(self) -> Dict[str, Dict[str, Any]]:
        return {plugin_id: self.get_plugin_info(plugin_id) for plugin_id in sorted(self._discovered)}

    def health_check(self) -> Dict[str, Any]:
        return {
            "total_discovered": len(self._discovered),
            "active_plugins": len(self._loaded),
            "host_build": self.host_build,
            "status": "healthy" if self._loaded else "warning",
        }

    def shutdown(self) -> None:
        for plugin_id in reversed(list(self._loaded)):
            self.unload_plugin(plugin_id)

    def _report(self, exc: Exception, operation: str, subject: str) -> None:
        self.error_handler.handle_error(
            exc,
            component="PluginManager",
            operation=operation,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.PLUGIN,
            metadata={"plugin": subject},
        )
