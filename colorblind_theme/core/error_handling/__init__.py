"""Error hierarchy and host-side fault handling."""

from .error_hierarchy import (
    ColorblindThemeError,
    ConfigError,
    CyclicServiceError,
    ErrorCategory,
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    IncompatiblePluginError,
    MissingMessageError,
    PluginLoadError,
    ProjectDisposedError,
    ServiceNotRegisteredError,
    ThemeValidationError,
)

__all__ = [
    "ColorblindThemeError",
    "ConfigError",
    "CyclicServiceError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorHandler",
    "ErrorSeverity",
    "IncompatiblePluginError",
    "MissingMessageError",
    "PluginLoadError",
    "ProjectDisposedError",
    "ServiceNotRegisteredError",
    "ThemeValidationError",
]
