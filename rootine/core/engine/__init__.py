"""
Engine — function registry, privilege-level loader and command router.

    from rootine.core.engine import CommandRouter, bootstrap
"""

from rootine.core.engine.loader import (
    NamespaceLoader,
    Runtime,
    bootstrap,
    determine_privilege,
    load_namespace,
)
from rootine.core.engine.registry import FunctionRegistry
from rootine.core.engine.router import CommandRouter, InvocationContext

__all__ = [
    "CommandRouter",
    "FunctionRegistry",
    "InvocationContext",
    "NamespaceLoader",
    "Runtime",
    "bootstrap",
    "determine_privilege",
    "load_namespace",
]
