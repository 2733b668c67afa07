"""
Domain models for the command framework.

    from rootine.core.models import ArgumentSpec, BoundArguments, PrivilegeLevel
"""

from rootine.core.models.arguments import (
    FLAG_TRUE,
    ArgumentSchema,
    ArgumentSpec,
    BoundArguments,
    CommonOptions,
    alnum_key,
)
from rootine.core.models.privilege import COMMON_NAMESPACE, PrivilegeLevel, all_namespaces
from rootine.core.models.receipt import Receipt
from rootine.core.models.status import ExitStatus
from rootine.core.models.target import (
    BareFunction,
    CommandScript,
    CommandTarget,
    NamespacedFunction,
)

__all__ = [
    # arguments.py
    "FLAG_TRUE",
    "ArgumentSchema",
    "ArgumentSpec",
    "BoundArguments",
    "CommonOptions",
    "alnum_key",
    # privilege.py
    "COMMON_NAMESPACE",
    "PrivilegeLevel",
    "all_namespaces",
    # receipt.py
    "Receipt",
    # status.py
    "ExitStatus",
    # target.py
    "BareFunction",
    "CommandScript",
    "CommandTarget",
    "NamespacedFunction",
]
