# colorblind_theme/plugins/plugin_manifest.py
"""
Plugin descriptor (plugin.json).

Declares what the host wires on load: project listeners, project services,
theme descriptors, the message bundle, and the host build range the plugin
supports.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.config.config_validator import ConfigValidator
from ..core.error_handling import ConfigError, PluginLoadError

SCHEMAS_DIR = Path(__file__).parent / "schemas"

_validator: Optional[ConfigValidator] = None


def _get_validator() -> ConfigValidator:
    global _validator
    if _validator is None:
        _validator = ConfigValidator(SCHEMAS_DIR)
    return _validator


def parse_build(build: Union[str, int, float]) -> Tuple[int, ...]:
    """'213.7172' -> (213, 7172)"""
    try:
        return tuple(int(part) for part in str(build).split("."))
    except ValueError:
        raise ValueError(f"Invalid build number: {build!r}") from None


def _compare_to_bound(build: Tuple[int, ...], bound: str) -> int:
    """-1, 0 or 1; a '*' segment matches everything from there on."""
    for i, part in enumerate(bound.split(".")):
        if part == "*":
            return 0
        value = build[i] if i < len(build) else 0
        if value != int(part):
            return 1 if value > int(part) else -1
    return 0


@dataclass
class ServiceDeclaration:
    implementation: str
    interface: Optional[str] = None


@dataclass
class PluginManifest:
    id: str
    name: str
    version: str
    since_build: str
    vendor: str = ""
    description: str = ""
    until_build: Optional[str] = None
    entry_point: Optional[str] = None
    resource_bundle: Optional[str] = None
    project_listeners: List[str] = field(default_factory=list)
    project_services: List[ServiceDeclaration] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    root: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], root: Optional[Path] = None,
                  source: str = "plugin.json") -> "PluginManifest":
        try:
            _get_validator().validate_config(data, "plugin", source=source)
        except ConfigError as e:
            raise PluginLoadError(f"Invalid plugin descriptor {source}: {e}") from e

        return cls(
            id=data["id"],
            name=data["name"],
            version=data["version"],
            since_build=data["since_build"],
            vendor=data.get("vendor", ""),
            description=data.get("description", ""),
            until_build=data.get("until_build"),
            entry_point=data.get("entry_point"),
            resource_bundle=data.get("resource_bundle"),
            project_listeners=list(data.get("project_listeners", [])),
            project_services=[ServiceDeclaration(**s) for s in data.get("project_services", [])],
            themes=list(data.get("themes", [])),
            root=root,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PluginManifest":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise PluginLoadError(f"Plugin descriptor not found: {path}") from e
        except json.JSONDecodeError as e:
            raise PluginLoadError(f"Invalid JSON in plugin descriptor {path}: {e}") from e
        return cls.from_dict(data, root=path.parent, source=str(path))

    def is_compatible(self, build: Union[str, int, float]) -> bool:
        """True if the host build lies within [since_build, until_build]."""
        parsed = parse_build(build)
        if _compare_to_bound(parsed, self.since_build) < 0:
            return False
        if self.until_build and _compare_to_bound(parsed, self.until_build) > 0:
            return False
        return True

    def resolve_path(self, relative: str) -> Path:
        if self.root is None:
            raise PluginLoadError(f"Plugin '{self.id}' has no root directory")
        return self.root / relative

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "vendor": self.vendor,
            "description": self.description,
            "since_build": self.since_build,
            "until_build": self.until_build,
            "entry_point": self.entry_point,
            "resource_bundle": self.resource_bundle,
            "project_listeners": list(self.project_listeners),
            "project_services": [
                {"implementation": s.implementation, "interface": s.interface}
                for s in self.project_services
            ],
            "themes": list(self.themes),
        }
