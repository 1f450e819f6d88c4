# colorblind_theme/core/config/env_loader.py
"""
Environment variables loader with type conversion.
Reads .env files next to the configuration, lets the OS environment win,
and turns prefixed variables into nested configuration overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_PREFIX = "COLORBLIND_THEME_"
NESTING_SEPARATOR = "__"


class EnvLoader:
    """
    Environment variable loader.

    Features:
    - Loads from .env, .env.<profile>, .env.local
    - Respects OS environment precedence
    - Type conversion guided by the settings schema, or guessed when none is given
    - Maps PREFIX_SECTION__KEY variables onto nested config keys
    """

    def __init__(
            self,
            base_path: Union[str, Path] = ".",
            profile: Optional[str] = None,
            prefix: str = ENV_PREFIX,
            environ: Optional[Mapping[str, str]] = None,
    ):
        self.base_path = Path(base_path).resolve()
        self.profile = profile
        self.prefix = prefix
        self._environ = environ
        self._raw: Dict[str, str] = {}
        self._cache: Dict[str, Any] = {}
        self._loaded = False

    def load(self) -> Dict[str, Any]:
        """Load and type-convert every variable visible to the application."""
        if self._loaded:
            return self._cache.copy()

        env_vars: Dict[str, str] = {}

        # .env.local overrides .env.<profile> which overrides .env
        for file_path in self._get_env_file_paths():
            if not file_path.exists():
                continue
            values = dotenv_values(file_path, encoding="utf-8")
            env_vars.update({k: v for k, v in values.items() if v is not None})
            logger.debug(f"Loaded environment file {file_path}")

        env_vars.update(self._environ if self._environ is not None else os.environ)

        self._raw = dict(env_vars)
        self._cache = self._convert_types(env_vars)
        self._loaded = True
        return self._cache.copy()

    def _get_env_file_paths(self) -> List[Path]:
        """Return ordered list of possible .env file paths (lowest to highest precedence)."""
        files = [self.base_path / ".env"]
        if self.profile:
            files.append(self.base_path / f".env.{self.profile}")
        files.append(self.base_path / ".env.local")
        return files

    def _convert_types(self, raw_vars: Mapping[str, str]) -> Dict[str, Any]:
        return {key: self.convert_value(value) for key, value in raw_vars.items()}

    @classmethod
    def convert_value(cls, value: Any) -> Any:
        """Convert a raw string to bool, int, float or list where it looks like one."""
        if not isinstance(value, str):
            return value

        lowered = value.lower()
        if lowered in ("true", "yes", "on"):
            return True
        if lowered in ("false", "no", "off"):
            return False
        if lowered in ("null", "none"):
            return None
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        if cls._is_float(value):
            return float(value)
        if "," in value and "[" not in value and "{" not in value:
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @staticmethod
    def _is_float(value: str) -> bool:
        try:
            float(value)
            return True
        except ValueError:
            return False

    @staticmethod
    def _schema_at(schema: Optional[Dict[str, Any]], path: List[str]) -> Optional[Dict[str, Any]]:
        node = schema
        for part in path:
            if not isinstance(node, dict):
                return None
            node = node.get("properties", {}).get(part)
        return node

    @classmethod
    def convert_for_schema(cls, value: str, schema: Optional[Dict[str, Any]]) -> Any:
        """
        Convert a raw string to the type the schema declares for its key.

        Strings stay strings ("213.100" is a build number, "no" is a locale);
        keys the schema does not describe fall back to `convert_value`.
        """
        if not schema or "type" not in schema:
            return cls.convert_value(value)

        types = schema["type"]
        if isinstance(types, str):
            types = [types]
        lowered = value.strip().lower()

        if "null" in types and lowered in ("null", "none", ""):
            return None
        if "string" in types:
            return value
        if "boolean" in types and lowered in ("true", "yes", "on", "1", "false", "no", "off", "0"):
            return lowered in ("true", "yes", "on", "1")
        if "integer" in types and (lowered.isdigit() or (lowered.startswith("-") and lowered[1:].isdigit())):
            return int(lowered)
        if "number" in types and cls._is_float(lowered):
            return float(lowered)
        if "array" in types:
            return [item.strip() for item in value.split(",") if item.strip()]
        # left as is; schema validation reports the mismatch
        return value

    def load_env_overrides(self, schema: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Build a nested override dict from prefixed variables.

        COLORBLIND_THEME_I18N__LOCALE=de  ->  {"i18n": {"locale": "de"}}

        With a JSON schema, each value is converted to the type declared at
        its path instead of being guessed from its text.
        """
        self.load()
        overrides: Dict[str, Any] = {}
        for key, raw in self._raw.items():
            if not key.startswith(self.prefix):
                continue
            path = [part.lower() for part in key[len(self.prefix):].split(NESTING_SEPARATOR) if part]
            if len(path) < 2:
                # top-level names like COLORBLIND_THEME_PROFILE are not config keys
                continue
            if schema is None:
                value = self._cache[key]
            else:
                value = self.convert_for_schema(raw, self._schema_at(schema, path))
            target = overrides
            for part in path[:-1]:
                target = target.setdefault(part, {})
            target[path[-1]] = value
        return overrides

    def get(self, key: str, default: Any = None) -> Any:
        if not self._loaded:
            self.load()
        return self._cache.get(key, default)

    def reload(self) -> None:
        """Force reload environment variables."""
        self._loaded = False
        self._raw.clear()
        self._cache.clear()
        self.load()
