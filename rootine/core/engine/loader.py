"""
Privilege-level loader — decide who we are, then load what we may use.

Runs once per process, before the router accepts a command:

    1. Privilege is derived from the effective user id (root → Elevated).
    2. The ``common`` namespace is loaded, then the namespace that
       matches the privilege level, each module in its declared order.
    3. Every exported function lands in the ``FunctionRegistry``.

A missing or unloadable module aborts the whole sequence with a
``LoadError``. There is no partially loaded state.
"""

from __future__ import annotations

import importlib
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass

from rootine.core.config.settings import Settings
from rootine.core.engine.registry import FunctionRegistry
from rootine.core.errors import LoadError
from rootine.core.models.privilege import COMMON_NAMESPACE, PrivilegeLevel

logger = logging.getLogger(__name__)


def determine_privilege(geteuid: Callable[[], int] = os.geteuid) -> PrivilegeLevel:
    """Elevated when running with effective uid 0, Standard otherwise."""
    return PrivilegeLevel.ELEVATED if geteuid() == 0 else PrivilegeLevel.STANDARD


class NamespaceLoader:
    """Imports namespace modules into a registry, exactly once."""

    def __init__(self, settings: Settings, registry: FunctionRegistry | None = None):
        self.settings = settings
        self.registry = registry if registry is not None else FunctionRegistry()
        self._loaded_for: PrivilegeLevel | None = None

    @property
    def loaded(self) -> bool:
        return self._loaded_for is not None

    def load(self, level: PrivilegeLevel) -> FunctionRegistry:
        """Load ``common`` then ``level``'s namespace.

        Raises:
            LoadError: A module is missing or fails to import, or the
                loader was already used for a different level.
        """
        if self._loaded_for is not None:
            if self._loaded_for is level:
                return self.registry
            raise LoadError(
                f"Namespaces already loaded for level '{self._loaded_for}', "
                f"cannot reload for '{level}'"
            )

        logger.debug("Initializing namespaces for level '%s'", level)
        staging = FunctionRegistry()
        for namespace in (COMMON_NAMESPACE, level.namespace):
            self._load_namespace(namespace, staging)

        # Only publish once every module loaded
        for namespace in staging.namespaces():
            for name in staging.list_functions(namespace):
                func = staging.get(namespace, name)
                self.registry.register(namespace, name, func, staging.origin(namespace, name) or "")

        self._loaded_for = level
        logger.debug("Namespaces initialized: %d functions", len(self.registry))
        return self.registry

    def _load_namespace(self, namespace: str, registry: FunctionRegistry) -> None:
        if namespace not in self.settings.namespaces:
            raise LoadError(f"No modules configured for namespace '{namespace}'")

        label = "Common" if namespace == COMMON_NAMESPACE else f"{namespace.capitalize()}-level"
        for dotted in self.settings.namespace_modules(namespace):
            try:
                module = importlib.import_module(dotted)
            except ModuleNotFoundError as e:
                logger.error("%s library module not accessible: %s (%s)", label, dotted, e)
                raise LoadError(f"{label} library module not accessible: {dotted}") from e
            except Exception as e:
                logger.error("%s library module failed to load: %s (%s)", label, dotted, e)
                raise LoadError(f"{label} library module failed to load: {dotted}: {e}") from e

            count = registry.register_module(namespace, module)
            logger.debug("Loaded %s (%d functions)", dotted, count)


def load_namespace(settings: Settings, level: PrivilegeLevel) -> FunctionRegistry:
    """Load ``common`` plus ``level``'s namespace into a fresh registry."""
    return NamespaceLoader(settings).load(level)


@dataclass(frozen=True)
class Runtime:
    """Everything the router needs, built once at startup."""

    settings: Settings
    privilege: PrivilegeLevel
    registry: FunctionRegistry


def bootstrap(settings: Settings, privilege: PrivilegeLevel | None = None) -> Runtime:
    """Determine privilege and load namespaces.

    Raises:
        LoadError: Initialization failed; nothing may run.
    """
    level = privilege if privilege is not None else determine_privilege()
    registry = load_namespace(settings, level)
    return Runtime(settings=settings, privilege=level, registry=registry)
