"""Theme registry."""

from .theme_registry import ThemeRegistry

__all__ = ["ThemeRegistry"]
