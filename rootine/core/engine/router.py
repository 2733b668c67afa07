"""
Command router — name → target → exit status.

Resolution strategies, tried strictly in this order; the first match
wins and the others are never consulted:

    1. ``lib::<namespace>::<function>``  explicit library call. The
       namespace must be ``common`` or the caller's own; another
       level's namespace is an access-control failure.
    2. Command script  ``<commands_package>.<level>.<name>`` module.
       Its tokens are bound against the module's ``ARGUMENTS`` and its
       ``main(context)`` is called.
    3. Bare function  looked up in ``common``, then the caller's
       namespace.

Nothing matched → ``NotFoundError`` naming the command and the level.
The router never retries.
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import pkgutil
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import ModuleType
from typing import Any

import click

from rootine.core.arguments.binder import bind_command, bind_common
from rootine.core.arguments.common import COMMON_ARGUMENTS
from rootine.core.arguments.help import render_help
from rootine.core.config.settings import Settings
from rootine.core.engine.loader import Runtime
from rootine.core.engine.registry import FunctionRegistry
from rootine.core.errors import (
    AccessControlError,
    NotFoundError,
    RootineError,
    UsageError,
)
from rootine.core.models.arguments import ArgumentSchema, BoundArguments, CommonOptions
from rootine.core.models.privilege import COMMON_NAMESPACE, PrivilegeLevel, all_namespaces
from rootine.core.models.receipt import Receipt
from rootine.core.models.status import ExitStatus
from rootine.core.models.target import (
    BareFunction,
    CommandScript,
    CommandTarget,
    NamespacedFunction,
)

logger = logging.getLogger(__name__)

_NAMESPACED_CALL = re.compile(r"^lib::([^:]+)::([^:]+)$")
_COMMAND_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def _request_id() -> str:
    return datetime.now(UTC).strftime("%Y%m%d_%H%M%S_%f")


def to_exit_status(result: Any) -> int:
    """Map a function's return value onto an exit status."""
    if result is None or result is True:
        return ExitStatus.SUCCESS
    if result is False:
        return ExitStatus.FAILURE
    if isinstance(result, Receipt):
        return result.exit_status
    if isinstance(result, int):
        return int(result)
    return ExitStatus.SUCCESS


def call_library_function(
    func: Callable[..., Any],
    args: Sequence[str],
    settings: Settings,
) -> Any:
    """Call ``func(*args)``, injecting ``settings`` when it asks for it.

    Raises:
        UsageError: ``args`` do not fit the function's signature.
    """
    signature = inspect.signature(func)
    kwargs: dict[str, Any] = {}
    settings_param = signature.parameters.get("settings")
    if settings_param is not None and settings_param.kind is inspect.Parameter.KEYWORD_ONLY:
        kwargs["settings"] = settings

    try:
        signature.bind(*args, **kwargs)
    except TypeError as e:
        shown = signature.replace(
            parameters=[p for name, p in signature.parameters.items() if name != "settings"],
        )
        raise UsageError(
            f"Invalid arguments for {func.__name__}: {e}",
            help_text=f"Usage: {func.__name__}{shown}",
        ) from e
    return func(*args, **kwargs)


@dataclass(frozen=True)
class InvocationContext:
    """What a command script sees while it runs.

    Built per invocation and discarded when the command returns.
    """

    settings: Settings
    privilege: PrivilegeLevel
    registry: FunctionRegistry
    command: str
    args: BoundArguments = field(default_factory=BoundArguments)
    options: CommonOptions = field(default_factory=CommonOptions)
    request_id: str = ""

    def call(self, name: str, *args: str) -> int:
        """Call a library function visible at this privilege level.

        Looks in ``common``, then the caller's namespace.

        Raises:
            NotFoundError: No visible function has that name.
        """
        found = self.registry.find(name, (COMMON_NAMESPACE, self.privilege.namespace))
        if found is None:
            raise NotFoundError(f"Library function not found: {name} (level: {self.privilege})")
        _, func = found
        return to_exit_status(call_library_function(func, args, self.settings))


class CommandRouter:
    """Resolves command names and invokes the result.

    Args:
        runtime: Settings, privilege and loaded registry.
        configure_logging: Called with the bound common options before a
            command script runs (``-d``, ``-q``, ``-l`` take effect here).
    """

    def __init__(
        self,
        runtime: Runtime,
        configure_logging: Callable[[CommonOptions], None] | None = None,
    ):
        self.runtime = runtime
        self._configure_logging = configure_logging

    @property
    def settings(self) -> Settings:
        return self.runtime.settings

    @property
    def privilege(self) -> PrivilegeLevel:
        return self.runtime.privilege

    @property
    def registry(self) -> FunctionRegistry:
        return self.runtime.registry

    # ── Resolution ──────────────────────────────────────────────

    def _script_module(self, command: str) -> str:
        return f"{self.settings.commands_package}.{self.privilege.namespace}.{command.replace('-', '_')}"

    def _script_exists(self, dotted: str) -> bool:
        try:
            return importlib.util.find_spec(dotted) is not None
        except (ImportError, ValueError):
            return False

    def resolve(self, command: str) -> CommandTarget:
        """Decide what ``command`` denotes.

        Raises:
            AccessControlError: ``lib::`` call into another level's namespace.
            NotFoundError: No strategy matched.
        """
        # 1. lib::<namespace>::<function>
        match = _NAMESPACED_CALL.match(command)
        if match:
            namespace, function_name = match.groups()
            if namespace not in all_namespaces():
                raise NotFoundError(
                    f"Invalid library specified: {namespace} "
                    f"(valid libraries: {', '.join(all_namespaces())})"
                )
            if not self.privilege.may_access(namespace):
                raise AccessControlError(
                    f"Access denied to library '{namespace}' "
                    f"(current level: {self.privilege}, required level: {namespace})"
                )
            if self.registry.get(namespace, function_name) is None:
                raise NotFoundError(
                    f"Function not found in library: {namespace}::{function_name}"
                )
            return NamespacedFunction(namespace=namespace, function_name=function_name)

        # 2. Command script for this privilege level
        if _COMMAND_NAME.match(command):
            dotted = self._script_module(command)
            if self._script_exists(dotted):
                return CommandScript(module=dotted, command=command)

        # 3. Bare function: common first, then the level's own namespace
        found = self.registry.find(command, (COMMON_NAMESPACE, self.privilege.namespace))
        if found is not None:
            return BareFunction(namespace=found[0], name=command)

        raise NotFoundError(
            f"Command or function not found: {command} (level: {self.privilege})"
        )

    # ── Invocation ──────────────────────────────────────────────

    def invoke(self, target: CommandTarget, args: Sequence[str], request_id: str = "") -> int:
        """Run a resolved target and return its exit status unchanged."""
        if isinstance(target, NamespacedFunction):
            logger.debug("Executing library function %s::%s", target.namespace, target.function_name)
            func = self.registry.get(target.namespace, target.function_name)
            if func is None:
                raise NotFoundError(f"Function not found in library: {target.namespace}::{target.function_name}")
            return to_exit_status(call_library_function(func, args, self.settings))

        if isinstance(target, CommandScript):
            logger.debug("Executing command script %s (%s)", target.command, target.module)
            module = importlib.import_module(target.module)
            return self.run_script(module, target.command, args, request_id)

        logger.debug("Executing direct function call %s (from %s)", target.name, target.namespace)
        func = self.registry.get(target.namespace, target.name)
        if func is None:
            raise NotFoundError(f"Command or function not found: {target.name}")
        return to_exit_status(call_library_function(func, args, self.settings))

    def run_script(
        self,
        module: ModuleType,
        command: str,
        args: Sequence[str],
        request_id: str = "",
    ) -> int:
        """Bind a command module's arguments and call its ``main``."""
        schema: ArgumentSchema = getattr(module, "ARGUMENTS", ArgumentSchema())
        entry = getattr(module, "main", None)
        if not callable(entry):
            raise RootineError(
                f"Command module {module.__name__} has no main()",
                exit_status=ExitStatus.SOFTWARE,
            )

        options = bind_common(args, COMMON_ARGUMENTS, schema)
        if self._configure_logging is not None:
            self._configure_logging(options)

        if options.help:
            header = inspect.getdoc(module) or ""
            click.echo(render_help(COMMON_ARGUMENTS, schema, header=header))
            return ExitStatus.SUCCESS
        if options.version:
            click.echo(f"Script version: {self.settings.version}")
            return ExitStatus.SUCCESS

        bound = bind_command(schema, options.remaining, COMMON_ARGUMENTS)
        context = InvocationContext(
            settings=self.settings,
            privilege=self.privilege,
            registry=self.registry,
            command=command,
            args=bound,
            options=options,
            request_id=request_id,
        )
        return to_exit_status(entry(context))

    def resolve_and_invoke(self, command: str, args: Sequence[str] = ()) -> int:
        """Resolve ``command`` and run it.

        Framework errors are logged and converted to their exit status;
        usage errors also print their help text to stderr.
        """
        request_id = _request_id()
        logger.debug("Processing call %s (request %s)", command, request_id)

        try:
            target = self.resolve(command)
            return self.invoke(target, list(args), request_id)
        except UsageError as e:
            logger.error("%s", e)
            if e.help_text:
                click.echo(e.help_text, err=True)
            return e.exit_status
        except RootineError as e:
            logger.error("%s", e)
            return e.exit_status

    # ── Discovery ───────────────────────────────────────────────

    def list_commands(self) -> list[str]:
        """Command scripts available at this privilege level."""
        package = f"{self.settings.commands_package}.{self.privilege.namespace}"
        try:
            pkg = importlib.import_module(package)
        except ImportError:
            return []
        return sorted(
            info.name.replace("_", "-")
            for info in pkgutil.iter_modules(getattr(pkg, "__path__", []))
            if not info.name.startswith("_")
        )

    def describe_commands(self) -> dict[str, str]:
        """Command name → first docstring line."""
        described: dict[str, str] = {}
        for name in self.list_commands():
            try:
                module = importlib.import_module(self._script_module(name))
            except ImportError as e:
                logger.warning("Cannot load command %s: %s", name, e)
                continue
            doc = inspect.getdoc(module) or ""
            described[name] = doc.splitlines()[0] if doc else ""
        return described
