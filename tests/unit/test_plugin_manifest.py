# tests/unit/test_plugin_manifest.py
"""Unit tests for plugin.json parsing and host build compatibility."""

import pytest

from colorblind_theme.core.error_handling import PluginLoadError
from colorblind_theme.plugins.plugin_manager import BUILTIN_DESCRIPTOR
from colorblind_theme.plugins.plugin_manifest import PluginManifest, parse_build

from ..fixtures import write_json

MINIMAL = {"id": "org.example.min", "name": "Min", "version": "1.2.3", "since_build": "213"}


def manifest(**overrides):
    return PluginManifest.from_dict({**MINIMAL, **overrides})


def test_builtin_descriptor():
    builtin = PluginManifest.from_file(BUILTIN_DESCRIPTOR)
    assert builtin.id == "com.github.captaingopher.colorblindtheme"
    assert builtin.entry_point == "colorblind_theme.plugin:ColorblindThemePlugin"
    assert builtin.resource_bundle == "colorblind_theme.bundle:ThemeBundle"
    assert builtin.project_listeners == [
        "colorblind_theme.listeners.project_manager_listener.ColorblindProjectManagerListener"
    ]
    assert builtin.project_services[0].implementation.endswith("ColorblindProjectService")
    assert builtin.project_services[0].interface is None
    assert len(builtin.themes) == 2
    assert builtin.root == BUILTIN_DESCRIPTOR.parent
    for relative in builtin.themes:
        assert builtin.resolve_path(relative).exists()


def test_minimal_defaults():
    m = manifest()
    assert m.until_build is None
    assert m.project_listeners == [] and m.project_services == [] and m.themes == []
    assert m.vendor == ""


def test_parse_build():
    assert parse_build("213.7172") == (213, 7172)
    assert parse_build(221) == (221,)
    with pytest.raises(ValueError):
        parse_build("213.x")


@pytest.mark.parametrize("since, until, build, expected", [
    ("213", "213.*", "213.7172", True),
    ("213", "213.*", "212.9999", False),
    ("213", "213.*", "221.1", False),
    ("213.5000", None, "213.4999", False),
    ("213.5000", None, "213.5000", True),
    ("213.5000", None, "400", True),
    ("203", "213.7172", "213.7172", True),
    ("203", "213.7172", "213.7173", False),
    ("203", "213", "213.9", True),
])
def test_is_compatible(since, until, build, expected):
    extra = {"until_build": until} if until else {}
    assert manifest(since_build=since, **extra).is_compatible(build) is expected


@pytest.mark.parametrize("broken", [
    {"version": "1.0"},
    {"since_build": "abc"},
    {"entry_point": "no_colon_here"},
    {"project_services": [{"implementation": "a.B", "extra": 1}]},
    {"project_listeners": ["not a path"]},
])
def test_invalid_descriptor(broken):
    with pytest.raises(PluginLoadError, match="Invalid plugin descriptor"):
        manifest(**broken)


def test_missing_required_field():
    data = dict(MINIMAL)
    del data["id"]
    with pytest.raises(PluginLoadError):
        PluginManifest.from_dict(data)


def test_from_file_errors(tmp_path):
    with pytest.raises(PluginLoadError, match="not found"):
        PluginManifest.from_file(tmp_path / "plugin.json")
    (tmp_path / "plugin.json").write_text("{", encoding="utf-8")
    with pytest.raises(PluginLoadError, match="Invalid JSON"):
        PluginManifest.from_file(tmp_path / "plugin.json")


def test_from_file_sets_root(tmp_path):
    path = write_json(tmp_path / "ext" / "plugin.json", MINIMAL)
    m = PluginManifest.from_file(path)
    assert m.root == tmp_path / "ext"
    assert m.resolve_path("themes/x.json") == tmp_path / "ext" / "themes" / "x.json"


def test_resolve_path_without_root():
    with pytest.raises(PluginLoadError):
        manifest().resolve_path("x")


def test_to_dict_round_trip():
    m = manifest(project_services=[{"implementation": "a.Impl", "interface": "a.Iface"}])
    data = m.to_dict()
    assert data["project_services"] == [{"implementation": "a.Impl", "interface": "a.Iface"}]
    assert data["id"] == "org.example.min"
