# colorblind_theme/core/themes/theme_registry.py
"""
Theme Registry — holds the themes contributed by plugins and tracks the
active one. Descriptors are validated against theme.schema.json.
"""

import copy
import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.config_validator import ConfigValidator
from ..error_handling import ConfigError, ThemeValidationError

logger = logging.getLogger("ThemeRegistry")

SCHEMAS_DIR = Path(__file__).parent / "schemas"
_HEX_COLOR = re.compile(r"^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")


class ThemeRegistry:
    """Registered themes keyed by id, plus the currently active theme."""

    def __init__(self):
        self._lock = threading.Lock()
        self._themes: Dict[str, Dict[str, Any]] = {}
        self._sources: Dict[str, Optional[str]] = {}
        self._active_id: Optional[str] = None
        self._validator = ConfigValidator(SCHEMAS_DIR)

    def load_theme_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Read and validate a theme descriptor without registering it."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                theme = json.load(f)
        except FileNotFoundError as e:
            raise ThemeValidationError(f"Theme file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ThemeValidationError(f"Invalid JSON in theme file {path}: {e}") from e
        self.validate(theme, source=str(path))
        return theme

    def validate(self, theme: Dict[str, Any], source: str = "theme") -> None:
        try:
            self._validator.validate_config(theme, "theme", source=source)
        except ConfigError as e:
            raise ThemeValidationError(str(e)) from e

        colors = theme["colors"]
        for key, value in theme.get("ui", {}).items():
            if value not in colors and not _HEX_COLOR.match(value):
                raise ThemeValidationError(
                    f"Theme '{theme['id']}': ui key '{key}' references unknown color '{value}'"
                )

    def register(self, theme: Dict[str, Any], source: Optional[str] = None) -> str:
        """Validate and register a theme. Returns its id."""
        self.validate(theme, source=source or "theme")
        theme_id = theme["id"]
        with self._lock:
            if theme_id in self._themes:
                raise ValueError(f"Theme '{theme_id}' is already registered")
            self._themes[theme_id] = copy.deepcopy(theme)
            self._sources[theme_id] = source
        logger.info(f"🎨 Theme registered: {theme_id} ({theme['name']})")
        return theme_id

    def unregister(self, theme_id: str) -> bool:
        with self._lock:
            if theme_id not in self._themes:
                return False
            del self._themes[theme_id]
            self._sources.pop(theme_id, None)
            if self._active_id == theme_id:
                self._active_id = None
        logger.info(f"Theme unregistered: {theme_id}")
        return True

    def unregister_source(self, source: str) -> List[str]:
        """Remove every theme registered with the given source tag (a plugin id)."""
        with self._lock:
            ids = [tid for tid, src in self._sources.items() if src == source]
        for theme_id in ids:
            self.unregister(theme_id)
        return ids

    def themes_from(self, source: str) -> List[str]:
        with self._lock:
            return sorted(tid for tid, src in self._sources.items() if src == source)

    def get(self, theme_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            theme = self._themes.get(theme_id)
            return copy.deepcopy(theme) if theme is not None else None

    def list_themes(self) -> Dict[str, str]:
        """Return {id: display name} for every registered theme."""
        with self._lock:
            return {tid: theme["name"] for tid, theme in sorted(self._themes.items())}

    def set_active(self, theme_id: Optional[str]) -> bool:
        """Make theme_id the active theme; None clears it. Returns False if unknown."""
        with self._lock:
            if theme_id is not None and theme_id not in self._themes:
                logger.error(f"❌ Cannot activate theme '{theme_id}': not registered")
                return False
            self._active_id = theme_id
        if theme_id is not None:
            logger.info(f"🎨 Active theme: {theme_id}")
        return True

    def active_theme(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            active_id = self._active_id
        return self.get(active_id) if active_id else None

    @property
    def active_theme_id(self) -> Optional[str]:
        return self._active_id

    def resolve_ui_color(self, theme_id: str, ui_key: str) -> Optional[str]:
        """Hex value of a ui key in a theme, following references into `colors`."""
        theme = self.get(theme_id)
        if theme is None:
            return None
        value = theme.get("ui", {}).get(ui_key)
        if value is None:
            return None
        return theme["colors"].get(value, value)
