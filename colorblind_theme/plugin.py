# colorblind_theme/plugin.py
"""
Colorblind Theme Plugin — entry point of the plugin.

The host registers the themes listed in plugin.json before this class is
initialized; the plugin then applies the configured one and restores the
previous theme when it is unloaded.
"""

import logging
from typing import Any, Dict, List, Optional

from . import __version__
from .bundle import ThemeBundle
from .plugins.base_plugin import BasePlugin

logger = logging.getLogger(__name__)


class ColorblindThemePlugin(BasePlugin):
    """
    Light and dark themes based on the Okabe-Ito palette, distinguishable
    with protanopia, deuteranopia and tritanopia.
    """

    PLUGIN_ID = "com.github.captaingopher.colorblindtheme"
    PLUGIN_NAME = "Colorblind Theme"
    PLUGIN_VERSION = __version__
    PLUGIN_DESCRIPTION = "Color-blind friendly light and dark themes"

    def __init__(self, plugin_id: str = PLUGIN_ID):
        super().__init__(plugin_id)
        self._previous_theme: Optional[str] = None

    def get_metadata(self) -> Dict[str, Any]:
        manifest = self._context.manifest if self._context else None
        return {
            "name": manifest.name if manifest else self.PLUGIN_NAME,
            "version": manifest.version if manifest else self.PLUGIN_VERSION,
            "description": manifest.description if manifest else self.PLUGIN_DESCRIPTION,
            "type": "theme",
            "themes": self.theme_ids(),
            "status": "active" if self.initialized else "inactive",
        }

    def theme_ids(self) -> List[str]:
        """Ids of the themes the host registered on behalf of this plugin."""
        if self._context is None:
            return []
        return self._context.themes.themes_from(self.plugin_id)

    def validate_config(self) -> bool:
        if not self.theme_ids():
            logger.error("❌ No colorblind themes were registered for this plugin.")
            return False
        return True

    def _internal_initialize(self) -> None:
        wanted = self.context.config.get("themes.active", None)
        if wanted in self.theme_ids():
            self.apply(wanted)
        elif wanted is not None:
            logger.debug(f"Configured theme '{wanted}' belongs to another plugin")

    def apply(self, theme_id: str) -> bool:
        """Make one of this plugin's themes the active theme."""
        themes = self.context.themes
        if theme_id not in self.theme_ids():
            logger.error(f"Unknown colorblind theme: {theme_id}")
            return False
        current = themes.active_theme_id
        if current != theme_id and current not in self.theme_ids():
            self._previous_theme = current
        themes.set_active(theme_id)
        logger.info(ThemeBundle.message("themeApplied", themes.get(theme_id)["name"]))
        return True

    def _internal_shutdown(self) -> None:
        themes = self.context.themes
        if themes.active_theme_id in self.theme_ids():
            previous = self._previous_theme
            themes.set_active(previous if previous in themes.list_themes() else None)
        self._previous_theme = None
