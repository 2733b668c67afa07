"""
Function registry — (namespace, name) → callable.

Populated once by the namespace loader so the router resolves library
functions with a map lookup instead of scanning files. When two modules
of a namespace export the same name, the first one loaded wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from types import ModuleType
from typing import Any

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """Central registry of library functions, grouped by namespace."""

    def __init__(self) -> None:
        self._functions: dict[tuple[str, str], Callable[..., Any]] = {}
        self._origins: dict[tuple[str, str], str] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __repr__(self) -> str:
        return f"<FunctionRegistry functions={len(self)} namespaces={self.namespaces()}>"

    def register(
        self,
        namespace: str,
        name: str,
        func: Callable[..., Any],
        origin: str = "",
    ) -> bool:
        """Register a function.

        Returns:
            False when the name was already defined in this namespace
            (the earlier definition is kept).
        """
        key = (namespace, name)
        if key in self._functions:
            logger.debug(
                "Keeping %s::%s from %s, ignoring %s",
                namespace,
                name,
                self._origins.get(key, "?"),
                origin or "?",
            )
            return False
        self._functions[key] = func
        self._origins[key] = origin
        logger.debug("Registered %s::%s", namespace, name)
        return True

    def register_module(self, namespace: str, module: ModuleType) -> int:
        """Register every public callable a module lists in ``__all__``.

        Returns:
            Number of functions newly registered.
        """
        count = 0
        for name in getattr(module, "__all__", ()):
            func = getattr(module, name, None)
            if callable(func) and self.register(namespace, name, func, origin=module.__name__):
                count += 1
        return count

    def get(self, namespace: str, name: str) -> Callable[..., Any] | None:
        """Look up a function in one namespace."""
        return self._functions.get((namespace, name))

    def find(self, name: str, namespaces: Iterable[str]) -> tuple[str, Callable[..., Any]] | None:
        """First ``(namespace, function)`` defining ``name``, in the given order."""
        for namespace in namespaces:
            func = self._functions.get((namespace, name))
            if func is not None:
                return namespace, func
        return None

    def origin(self, namespace: str, name: str) -> str | None:
        """Module that defined a registered function."""
        return self._origins.get((namespace, name))

    def namespaces(self) -> list[str]:
        """Namespaces with at least one function, in registration order."""
        seen: dict[str, None] = {}
        for namespace, _ in self._functions:
            seen.setdefault(namespace)
        return list(seen)

    def list_functions(self, namespace: str | None = None) -> list[str]:
        """Registered names, optionally restricted to one namespace."""
        return sorted(
            name for ns, name in self._functions if namespace is None or ns == namespace
        )
