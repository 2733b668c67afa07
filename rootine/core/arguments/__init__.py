"""
Argument system — common schema table, validator, binder and help.

    from rootine.core.arguments import COMMON_ARGUMENTS, bind, bind_common
"""

from rootine.core.arguments.binder import bind, bind_command, bind_common
from rootine.core.arguments.common import COMMON_ARGUMENTS
from rootine.core.arguments.help import render_command_help, render_common_help, render_help
from rootine.core.arguments.validator import validate_value

__all__ = [
    "COMMON_ARGUMENTS",
    "bind",
    "bind_command",
    "bind_common",
    "render_command_help",
    "render_common_help",
    "render_help",
    "validate_value",
]
