# colorblind_theme/core/config/config_validator.py
"""
Configuration Validator.
Validates configuration dictionaries against the JSON schemas shipped in
`core/config/schemas` (or any other directory of *.schema.json files).
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from jsonschema import ValidationError
from jsonschema.validators import validator_for

from ..error_handling import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMAS_DIR = Path(__file__).parent / "schemas"


class ConfigValidator:
    """
    Validates configuration dictionaries or files against predefined JSON schemas.
    Schemas are compiled once, at construction.
    """

    def __init__(self, schemas_dir: Union[str, Path] = DEFAULT_SCHEMAS_DIR):
        """
        Args:
            schemas_dir (Union[str, Path]): Path to directory with *.schema.json files.
        """
        self.schemas_dir = Path(schemas_dir).resolve()
        if not self.schemas_dir.exists():
            raise FileNotFoundError(f"Schema directory not found: {self.schemas_dir}")
        self._compiled_schemas: Dict[str, Any] = {}
        self._raw_schemas: Dict[str, Dict[str, Any]] = {}
        self._load_all_schemas()
        logger.debug(f"ConfigValidator initialized with schemas from {self.schemas_dir}")

    def _load_all_schemas(self) -> None:
        for schema_path in self.schemas_dir.glob("*.schema.json"):
            schema_name = schema_path.name[: -len(".schema.json")]
            try:
                with open(schema_path, "r", encoding="utf-8") as f:
                    raw_schema = json.load(f)
            except json.JSONDecodeError as e:
                logger.error(f"Invalid JSON in schema file {schema_path}: {e}")
                raise ConfigError(f"Corrupted schema file: {schema_path}") from e

            validator_class = validator_for(raw_schema)
            validator_class.check_schema(raw_schema)
            self._compiled_schemas[schema_name] = validator_class(raw_schema)
            self._raw_schemas[schema_name] = raw_schema
            logger.debug(f"Loaded schema: {schema_name}")

    def validate_config(
        self,
        config_data: Dict[str, Any],
        schema_name: str,
        source: str = "unknown"
    ) -> bool:
        """
        Validate a configuration dictionary against a named schema.

        Args:
            config_data (Dict[str, Any]): Configuration data to validate.
            schema_name (str): Name of the schema ('settings' uses settings.schema.json).
            source (str): Human-readable source (file path or profile name) for logging.

        Returns:
            bool: True if valid.

        Raises:
            ConfigError: If validation fails or schema is missing.
        """
        if schema_name not in self._compiled_schemas:
            available = ", ".join(sorted(self._compiled_schemas))
            raise ConfigError(f"Schema '{schema_name}' not found. Available: {available}")

        validator = self._compiled_schemas[schema_name]
        try:
            validator.validate(config_data)
        except ValidationError as ve:
            location = " -> ".join(map(str, ve.absolute_path)) or "<root>"
            message = (
                f"Configuration validation failed for '{source}' using schema "
                f"'{schema_name}': {ve.message} at {location}"
            )
            logger.error(f"❌ {message}")
            raise ConfigError(message) from ve

        logger.debug(f"✅ Configuration '{source}' passed validation against '{schema_name}' schema.")
        return True

    def validate_file(self, config_path: Union[str, Path], schema_name: str) -> bool:
        """Load and validate a JSON configuration file directly."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {config_path}: {e}") from e

        return self.validate_config(config_data, schema_name, source=str(config_path))

    def get_available_schemas(self) -> List[str]:
        return sorted(self._compiled_schemas)

    def get_schema(self, schema_name: str) -> Dict[str, Any]:
        """Return a copy of the raw schema document registered under `schema_name`."""
        if schema_name not in self._raw_schemas:
            raise ConfigError(f"Schema '{schema_name}' not found")
        return copy.deepcopy(self._raw_schemas[schema_name])
