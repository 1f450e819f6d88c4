# colorblind_theme/plugins/base_plugin.py
"""
Base Plugin Class.
A plugin's optional entry point (`entry_point` in plugin.json) must inherit
from this class to take part in lifecycle management.
"""

import abc
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ..core.config.unified_config_manager import UnifiedConfigManager
    from ..core.dependency.project_service_registry import ProjectServiceRegistry
    from ..core.error_handling import ErrorHandler
    from ..core.project.project_manager import ProjectManager
    from ..core.themes.theme_registry import ThemeRegistry
    from .plugin_manifest import PluginManifest


@dataclass(frozen=True)
class PluginContext:
    """Host services handed to a plugin when it initializes."""

    manifest: "PluginManifest"
    plugin_root: Path
    config: "UnifiedConfigManager"
    project_manager: "ProjectManager"
    project_services: "ProjectServiceRegistry"
    themes: "ThemeRegistry"
    error_handler: "ErrorHandler"
    logger: logging.Logger


class BasePlugin(abc.ABC):
    """
    Abstract base class for plugin entry points.

    Each plugin must implement:
        - `get_metadata()`
        - `_internal_initialize()`

    Optional hooks:
        - `_internal_shutdown()`
        - `on_load()`
        - `on_unload()`
        - `validate_config()`
    """

    def __init__(self, plugin_id: str):
        if not plugin_id or not isinstance(plugin_id, str):
            raise ValueError("plugin_id must be a non-empty string")

        self.plugin_id = plugin_id
        self._context: Optional[PluginContext] = None
        self._logger = logging.getLogger(f"Plugin.{self.plugin_id}")
        self._initialized = False
        self._enabled = True

    @property
    def context(self) -> PluginContext:
        if self._context is None:
            raise RuntimeError(f"Plugin '{self.plugin_id}' has not been initialized with a context")
        return self._context

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if not isinstance(value, bool):
            raise TypeError("enabled must be a boolean")
        self._enabled = value
        self._logger.info(f"Plugin '{self.plugin_id}' {'enabled' if value else 'disabled'}.")

    @abc.abstractmethod
    def get_metadata(self) -> Dict[str, Any]:
        """
        Return plugin metadata.

        Required fields:
            - name: str
            - version: str (semver)
            - description: str
            - type: str (e.g. "theme")
        """

    def validate_config(self) -> bool:
        """Optional plugin-specific configuration check, run before initialization."""
        return True

    def initialize(self, context: PluginContext) -> bool:
        """
        Initialize the plugin. Idempotent.
        Returns True on success, False if disabled or configuration is invalid.
        Exceptions from `_internal_initialize` propagate to the plugin manager.
        """
        if self._initialized:
            self._logger.debug("Plugin already initialized. Skipping re-initialization.")
            return True

        if not self._enabled:
            self._logger.warning("Plugin is disabled. Skipping initialization.")
            return False

        self._context = context
        metadata = self.get_metadata()
        self._logger.info(f"Initializing {metadata['name']} v{metadata['version']}")

        if not self.validate_config():
            self._logger.error("❌ Plugin configuration validation failed.")
            return False

        self._internal_initialize()
        self._initialized = True
        self._logger.info("✅ Plugin initialized successfully.")
        return True

    @abc.abstractmethod
    def _internal_initialize(self) -> None:
        """Plugin-specific initialization. Called once from `initialize()`."""

    def shutdown(self) -> None:
        """Release plugin resources. Safe to call even if not initialized."""
        if not self._initialized:
            return
        self._internal_shutdown()
        self._initialized = False
        self._logger.info("🔌 Plugin shut down.")

    def _internal_shutdown(self) -> None:
        pass

    def on_load(self) -> None:
        """Hook called right after the plugin is wired into the host."""

    def on_unload(self) -> None:
        """Hook called before the plugin is removed from the host."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id='{self.plugin_id}', initialized={self._initialized}, enabled={self._enabled})>"
