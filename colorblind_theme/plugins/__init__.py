"""
Plugin subsystem: descriptors, entry-point base class and the manager that
wires plugins into the host.
"""

from .base_plugin import BasePlugin, PluginContext
from .plugin_manager import PluginManager
from .plugin_manifest import PluginManifest

__all__ = ["BasePlugin", "PluginContext", "PluginManager", "PluginManifest"]
