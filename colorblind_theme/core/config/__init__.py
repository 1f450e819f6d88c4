"""
Configuration subsystem.
Layered, validated and optionally hot-reloaded settings for the host and its plugins.
"""

from .config_validator import ConfigValidator
from .env_loader import EnvLoader
from .unified_config_manager import UnifiedConfigManager

__all__ = [
    "ConfigValidator",
    "EnvLoader",
    "UnifiedConfigManager",
]
