# colorblind_theme/core/application.py
"""
Host Application — composition root.

Builds configuration, logging and error handling, registers the host
services in a ServiceLocator and drives plugin loading. Services are
registered in dependency order so that ServiceLocator.shutdown() (newest
first) closes projects, then unloads plugins, then stops the config watcher.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config.unified_config_manager import UnifiedConfigManager
from .dependency.project_service_registry import ProjectServiceRegistry
from .dependency.service_locator import ServiceLocator
from .error_handling import ColorblindThemeError, ErrorHandler
from .logging_config import setup_logging
from .project.project_manager import ProjectManager
from .themes.theme_registry import ThemeRegistry
from ..plugins.plugin_manager import PluginManager

logger = logging.getLogger("HostApplication")


class HostApplication:
    """
    Owns every host service for the lifetime of the process.

    Usage:
        with HostApplication(config_dir="config") as app:
            app.project_manager.open_project("demo")
    """

    def __init__(
        self,
        config_dir: Union[str, Path] = "config",
        profile: Optional[str] = None,
        locale: Optional[str] = None,
        debug: bool = False,
        enable_hot_reload: bool = False,
        configure_logging: bool = True,
        log_stream=None,
        builtin_descriptors: Optional[list] = None,
    ):
        overrides: Dict[str, Any] = {}
        if locale:
            overrides["i18n"] = {"locale": locale}
        if debug:
            overrides["logging"] = {"level": "DEBUG"}

        self.config = UnifiedConfigManager(
            base_config_dir=config_dir,
            profile=profile,
            enable_hot_reload=enable_hot_reload,
            overrides=overrides,
        )
        if configure_logging:
            setup_logging(
                level=self.config.get("logging.level"),
                log_file=self.config.get("logging.file", None),
                fmt=self.config.get("logging.format"),
                stream=log_stream,
            )

        self.error_handler = ErrorHandler(
            history_size=self.config.get("host.error_history_size", 100),
            log_path=self.config.get("host.error_log", None),
        )
        self.themes = ThemeRegistry()
        self.project_services = ProjectServiceRegistry(self.error_handler)
        self.project_manager = ProjectManager(
            self.project_services,
            error_handler=self.error_handler,
            raise_listener_errors=self.config.get("host.raise_listener_errors", False),
        )
        self.plugin_manager = PluginManager(
            self.config,
            self.project_manager,
            self.project_services,
            self.themes,
            error_handler=self.error_handler,
            builtin_descriptors=builtin_descriptors,
        )

        self.locator = ServiceLocator()
        self.locator.register_instance("config", self.config)
        self.locator.register_instance("error_handler", self.error_handler)
        self.locator.register_instance("themes", self.themes)
        self.locator.register_instance("project_services", self.project_services)
        self.locator.register_instance("plugin_manager", self.plugin_manager)
        self.locator.register_instance("project_manager", self.project_manager)

        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> "HostApplication":
        """Load every plugin and apply the configured theme. Idempotent."""
        if self._started:
            return self
        self._ensure_running()
        logger.info(f"🚀 Starting host (build {self.plugin_manager.host_build}, profile {self.config.profile})")

        loaded = self.plugin_manager.load_all()
        logger.info(f"✅ {len(loaded)} plugin(s) loaded")

        wanted = self.config.get("themes.active", None)
        if wanted and self.themes.active_theme_id != wanted:
            if not self.themes.set_active(wanted):
                logger.warning(f"Configured theme '{wanted}' is not provided by any plugin")

        self._started = True
        return self

    def _ensure_running(self) -> None:
        if self.locator is None:
            raise ColorblindThemeError("Host has been shut down")

    def get_service(self, name: str) -> Any:
        self._ensure_running()
        return self.locator.get_service(name)

    def shutdown(self) -> None:
        """Close projects, unload plugins, stop the config watcher."""
        if self.locator is None:
            return
        logger.info("🛑 Shutting down host...")
        self.locator.shutdown()
        self.locator = None
        self._started = False
        logger.info("✅ Host stopped")

    def __enter__(self) -> "HostApplication":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
