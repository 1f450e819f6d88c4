# colorblind_theme/core/dependency/service_locator.py
"""
Service Locator — application-scope registry of host services
(config, error handler, project manager, plugin manager, themes).

Project-scope services live in ProjectServiceRegistry instead.
"""

import logging
import threading
from typing import Any, Callable, Dict

logger = logging.getLogger("ServiceLocator")


class ServiceLocator:
    """
    Thread-safe service locator with lazy instantiation and lifecycle control.
    One instance is owned by the HostApplication.
    """

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._singleton_flags: Dict[str, bool] = {}
        self._lock = threading.RLock()

    def register_service(
        self,
        name: str,
        factory: Callable[[], Any],
        singleton: bool = True,
        override: bool = False
    ) -> None:
        """
        Register a service factory under a name.

        :param name: Unique service name
        :param factory: Zero-argument callable returning the instance
        :param singleton: If True the instance is created once and cached
        :param override: Allow replacing an existing registration
        """
        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")
        with self._lock:
            if name in self._factories:
                if not override:
                    raise ValueError(f"Service '{name}' already registered. Use override=True to replace.")
                logger.warning(f"⚠️ Overriding existing service: {name}")

            self._factories[name] = factory
            self._singleton_flags[name] = singleton
            self._services.pop(name, None)
            logger.debug(f"Registered service: {name} (singleton={singleton})")

    def register_instance(self, name: str, instance: Any, override: bool = False) -> None:
        """Register an already constructed object."""
        self.register_service(name, lambda: instance, singleton=True, override=override)
        with self._lock:
            self._services[name] = instance

    def get_service(self, name: str) -> Any:
        """
        Return the service registered under name, creating it on first use.

        :raises KeyError: if the service is not registered
        """
        with self._lock:
            if name in self._services:
                return self._services[name]

            if name not in self._factories:
                raise KeyError(f"Service '{name}' is not registered in ServiceLocator.")

            instance = self._factories[name]()
            if self._singleton_flags.get(name, True):
                self._services[name] = instance

            logger.debug(f"Instantiated service: {name}")
            return instance

    def has_service(self, name: str) -> bool:
        return name in self._factories

    def unregister_service(self, name: str) -> None:
        with self._lock:
            self._factories.pop(name, None)
            self._services.pop(name, None)
            self._singleton_flags.pop(name, None)
            logger.debug(f"Unregistered service: {name}")

    def reset(self) -> None:
        """Drop every registration without calling shutdown hooks."""
        with self._lock:
            self._services.clear()
            self._factories.clear()
            self._singleton_flags.clear()

    def shutdown(self) -> None:
        """Call shutdown() on created instances, newest first, then reset."""
        with self._lock:
            instances = list(self._services.items())
        for name, instance in reversed(instances):
            hook = getattr(instance, "shutdown", None)
            if callable(hook):
                try:
                    hook()
                except Exception as e:
                    logger.warning(f"Error during shutdown of service {name}: {e}")
        self.reset()
        logger.info("ServiceLocator shut down")
