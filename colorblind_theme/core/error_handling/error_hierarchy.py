# colorblind_theme/core/error_handling/error_hierarchy.py
"""
Error hierarchy and host-side fault handling.

Plugin code never catches anything: failures raised from listeners and
project services travel up to the host layer, which classifies them,
keeps a short history for diagnostics and logs them with a traceback.
"""

import json
import logging
import threading
import traceback
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Union


class ColorblindThemeError(Exception):
    """Base class for all errors raised by the host layer."""


class ConfigError(ColorblindThemeError):
    """Configuration could not be loaded or failed validation."""


class MissingMessageError(ColorblindThemeError, KeyError):
    """A localized message key is absent from every candidate bundle."""

    def __init__(self, bundle_name: str, key: str):
        self.bundle_name = bundle_name
        self.key = key
        super().__init__(f"Message key '{key}' not found in bundle '{bundle_name}'")

    def __str__(self) -> str:
        return self.args[0]


class ServiceNotRegisteredError(ColorblindThemeError, KeyError):
    """No project service is registered for the requested type."""

    def __init__(self, service_type: Any):
        self.service_type = service_type
        name = getattr(service_type, "__qualname__", repr(service_type))
        super().__init__(f"Service '{name}' is not registered for project scope")

    def __str__(self) -> str:
        return self.args[0]


class ProjectDisposedError(ColorblindThemeError):
    """A service was requested from a project that is already closed."""


class CyclicServiceError(ColorblindThemeError):
    """A project service requested itself while being constructed."""


class PluginLoadError(ColorblindThemeError):
    """Raised when a plugin fails to load or validate."""


class IncompatiblePluginError(PluginLoadError):
    """The plugin's declared build range does not include the host build."""


class ThemeValidationError(ColorblindThemeError):
    """A theme descriptor does not match the theme schema."""


class ErrorSeverity(Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class ErrorCategory(Enum):
    CONFIGURATION = "config"
    PLUGIN = "plugin"
    LISTENER = "listener"
    SERVICE = "service"
    LOCALIZATION = "i18n"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Snapshot of a failure, kept for diagnostics."""
    error_id: str
    timestamp: datetime
    exception_type: str
    exception_message: str
    traceback: str
    severity: ErrorSeverity
    category: ErrorCategory
    component: str
    operation: str
    project: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "exception_type": self.exception_type,
            "exception_message": self.exception_message,
            "traceback": self.traceback,
            "severity": self.severity.name,
            "category": self.category.value,
            "component": self.component,
            "operation": self.operation,
            "project": self.project,
        }
        if self.metadata:
            result["metadata"] = self.metadata
        return result

    @classmethod
    def from_exception(cls,
                       exc: BaseException,
                       component: str,
                       operation: str,
                       severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                       category: ErrorCategory = ErrorCategory.UNKNOWN,
                       **kwargs) -> "ErrorContext":
        """Build a context from an exception instance."""
        return cls(
            error_id=str(uuid.uuid4()),
            timestamp=datetime.now(),
            exception_type=type(exc).__name__,
            exception_message=str(exc),
            traceback="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            severity=severity,
            category=category,
            component=component,
            operation=operation,
            project=kwargs.get("project"),
            metadata=kwargs.get("metadata") or {},
        )


class ErrorHandler:
    """
    Centralized host-side error sink.

    - logs every reported failure with its traceback
    - keeps a bounded history of ErrorContext records
    - counts failures per component
    - optionally appends JSON lines to an error log file
    """

    def __init__(self, history_size: int = 100, log_path: Optional[Union[str, Path]] = None):
        self._logger = logging.getLogger("ErrorHandler")
        self._history: Deque[ErrorContext] = deque(maxlen=history_size)
        self._error_stats: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._log_path = Path(log_path) if log_path else None
        if self._log_path:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)

    def handle_error(self,
                     exc: BaseException,
                     component: str,
                     operation: str,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                     category: ErrorCategory = ErrorCategory.UNKNOWN,
                     project: Optional[str] = None,
                     metadata: Optional[Dict[str, Any]] = None) -> ErrorContext:
        """
        Record a failure and log it.

        Args:
            exc: the exception that was raised
            component: class or subsystem where it happened
            operation: what the component was doing
            severity: how bad it is
            category: routing category
            project: display name of the affected project, if any
            metadata: extra diagnostic fields

        Returns:
            The recorded ErrorContext.
        """
        context = ErrorContext.from_exception(
            exc,
            component=component,
            operation=operation,
            severity=severity,
            category=category,
            project=project,
            metadata=metadata,
        )

        with self._lock:
            self._history.append(context)
            stats = self._error_stats.setdefault(component, {"count": 0, "last_error": None})
            stats["count"] += 1
            stats["last_error"] = context.timestamp.isoformat()
            if self._log_path:
                self._append_to_log(context)

        level = logging.CRITICAL if severity is ErrorSeverity.CRITICAL else logging.ERROR
        self._logger.log(
            level,
            f"💥 {component}.{operation} failed: {context.exception_type}: {context.exception_message}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return context

    def _append_to_log(self, context: ErrorContext) -> None:
        with open(self._log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(context.to_dict(), ensure_ascii=False) + "\n")

    def recent_errors(self, limit: Optional[int] = None) -> List[ErrorContext]:
        """Return recorded errors, oldest first."""
        with self._lock:
            errors = list(self._history)
        if limit is not None:
            return errors[-limit:] if limit > 0 else []
        return errors

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {name: dict(stats) for name, stats in self._error_stats.items()}

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
            self._error_stats.clear()
