# colorblind_theme/core/config/unified_config_manager.py
"""
Unified Configuration Manager.
Provides a single source of truth for host and plugin settings with:
- Packaged defaults merged with settings.json and a profile file
- Environment variable overrides (.env files + OS environment)
- Schema validation (JSON Schema)
- Optional hot-reloading via a file system watcher
- Thread-safe access
"""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..error_handling import ConfigError
from .config_validator import ConfigValidator
from .env_loader import ENV_PREFIX, EnvLoader

logger = logging.getLogger("UnifiedConfigManager")

DEFAULT_SETTINGS_FILE = Path(__file__).resolve().parent.parent.parent / "resources" / "default_settings.json"
PROFILE_ENV_VAR = f"{ENV_PREFIX}PROFILE"

_MISSING = object()


class ConfigReloadHandler(FileSystemEventHandler):
    """Handles file system events to trigger hot-reload."""

    def __init__(self, config_manager: "UnifiedConfigManager"):
        self.config_manager = config_manager

    def on_modified(self, event):
        if not event.is_directory and str(event.src_path).endswith(".json"):
            logger.info(f"🔄 Detected config change: {event.src_path}")
            self.config_manager._reload_config_safely()


class UnifiedConfigManager:
    """
    Centralized, thread-safe configuration manager with profiles,
    validation and optional hot-reload.
    """

    def __init__(
        self,
        base_config_dir: Union[str, Path] = "config",
        profile: Optional[str] = None,
        enable_hot_reload: bool = False,
        validator: Optional[ConfigValidator] = None,
        env_loader: Optional[EnvLoader] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self._lock = threading.RLock()
        self._base_config_dir = Path(base_config_dir).resolve()
        self._profile = profile or os.getenv(PROFILE_ENV_VAR, "default")
        self._enable_hot_reload = enable_hot_reload
        self._config: Dict[str, Any] = {}
        self._validator = validator or ConfigValidator()
        self._env_loader = env_loader or EnvLoader(self._base_config_dir, profile=self._profile)
        self._observer: Optional[Observer] = None
        # command-line level overrides, applied on top of the environment
        self._overrides = copy.deepcopy(overrides or {})

        self._load_config()
        if self._enable_hot_reload:
            self._start_hot_reload_watcher()

    @property
    def profile(self) -> str:
        return self._profile

    @property
    def config_dir(self) -> Path:
        return self._base_config_dir

    def _load_config(self) -> None:
        """Load and merge defaults + settings + profile + env, then validate."""
        with self._lock:
            merged = self._load_json_file(DEFAULT_SETTINGS_FILE, required=True)

            settings = self._load_json_file(self._base_config_dir / "settings.json")
            merged = self._deep_merge(merged, settings)

            profile_path = self._base_config_dir / "profiles" / f"{self._profile}.json"
            if profile_path.exists():
                merged = self._deep_merge(merged, self._load_json_file(profile_path))
                logger.info(f"✅ Loaded profile config: {self._profile}")

            env_overrides = self._env_loader.load_env_overrides(self._validator.get_schema("settings"))
            merged = self._deep_merge(merged, env_overrides)
            merged = self._deep_merge(merged, self._overrides)

            self._validator.validate_config(merged, "settings", source=str(self._base_config_dir))

            self._config = merged
            logger.debug(f"Configuration loaded (profile: {self._profile})")

    def _load_json_file(self, path: Path, required: bool = False) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            if required:
                raise
            logger.debug(f"Config file not found: {path}")
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"❌ Invalid JSON in {path}: {e}")
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return data

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Recursively merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _reload_config_safely(self) -> bool:
        """Reload config; keep the previous one if the new one is broken."""
        with self._lock:
            old_config = self._config
            try:
                self._env_loader.reload()
                self._load_config()
            except (ConfigError, OSError) as e:
                logger.error(f"⚠️ Hot-reload failed, keeping previous config: {e}")
                self._config = old_config
                return False
        logger.info("✅ Hot-reload completed successfully.")
        return True

    def _start_hot_reload_watcher(self) -> None:
        if not self._base_config_dir.is_dir():
            logger.warning(f"Hot-reload requested but {self._base_config_dir} does not exist")
            return
        self._observer = Observer()
        self._observer.schedule(ConfigReloadHandler(self), str(self._base_config_dir), recursive=True)
        self._observer.start()
        logger.info(f"👁️  Hot-reload enabled for config directory: {self._base_config_dir}")

    def reload(self) -> None:
        """Re-read every layer. Errors propagate and the previous config stays in place."""
        with self._lock:
            old_config = self._config
            try:
                self._env_loader.reload()
                self._load_config()
            except Exception:
                self._config = old_config
                raise

    def get(self, key_path: str, default: Any = _MISSING) -> Any:
        """
        Get config value by dot-separated key path.
        Example: get("i18n.locale")
        """
        with self._lock:
            value: Any = self._config
            try:
                for k in key_path.split("."):
                    value = value[k]
            except (KeyError, TypeError):
                if default is not _MISSING:
                    return default
                raise KeyError(f"Config key not found: {key_path}")
            return copy.deepcopy(value)

    def get_section(self, section: str) -> Dict[str, Any]:
        value = self.get(section, {})
        return value if isinstance(value, dict) else {}

    def set_profile(self, profile: str) -> None:
        """Switch to a new profile and reload config."""
        logger.info(f"🔄 Switching config profile to: {profile}")
        with self._lock:
            previous = self._profile
            self._profile = profile
            self._env_loader.profile = profile
            try:
                self.reload()
            except Exception:
                self._profile = previous
                self._env_loader.profile = previous
                raise

    def get_all(self) -> Dict[str, Any]:
        """Return a deep copy of the entire config (safe for external use)."""
        with self._lock:
            return copy.deepcopy(self._config)

    def shutdown(self) -> None:
        """Stop the hot-reload observer, if running."""
        if self._observer is not None and self._observer.is_alive():
            self._observer.stop()
            self._observer.join()
            logger.info("⏹️  Config watcher stopped.")
        self._observer = None
