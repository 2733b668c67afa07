"""
Rootine — CLI entrypoint.

Usage:
    rootine <command> [common arguments] [command arguments]
    rootine lib::<namespace>::<function> [args...]
    rootine help
    rootine --version
"""

from __future__ import annotations

import logging
import sys

import click

from rootine.core.arguments.common import COMMON_ARGUMENTS
from rootine.core.arguments.help import render_common_help
from rootine.core.config import Settings, load_settings
from rootine.core.engine.loader import Runtime, bootstrap, determine_privilege
from rootine.core.engine.registry import FunctionRegistry
from rootine.core.engine.router import CommandRouter
from rootine.core.errors import ConfigError, LoadError
from rootine.core.models.arguments import CommonOptions
from rootine.core.models.status import ExitStatus
from rootine.core.observability.logging_config import setup_logging

logger = logging.getLogger(__name__)

HELP_COMMANDS = ("help", "-h", "--help")
VERSION_COMMANDS = ("-v", "--version")


def render_usage(settings: Settings, commands: dict[str, str]) -> str:
    """Top-level help: usage line, common arguments, available commands."""
    program = settings.program_name
    lines = [
        f"Usage: {program} <command> [common arguments] [command arguments]",
        f"       {program} lib::<namespace>::<function> [args...]",
        "",
        render_common_help(COMMON_ARGUMENTS),
        "",
        "Available commands:",
    ]
    if not commands:
        lines.append("  (none)")
    for name, summary in commands.items():
        lines.append(f"  {name:<26} {summary}")
    return "\n".join(lines) + "\n"


def _usage_text(settings: Settings) -> str:
    # Listing commands needs no loaded namespaces
    runtime = Runtime(settings=settings, privilege=determine_privilege(), registry=FunctionRegistry())
    return render_usage(settings, CommandRouter(runtime).describe_commands())


def _logging_configurer(settings: Settings):
    def configure(options: CommonOptions) -> None:
        if options.debug:
            level = "DEBUG"
        elif options.quiet:
            level = "ERROR"
        else:
            level = settings.log_level
        if options.debug or options.quiet or options.log_file:
            setup_logging(level=level, log_file=options.log_file or settings.log_file)

    return configure


def run(argv: tuple[str, ...] | list[str]) -> int:
    """Run one invocation and return its exit status."""
    try:
        settings = load_settings()
    except ConfigError as e:
        setup_logging()
        logger.error("%s", e)
        return e.exit_status

    setup_logging(level=settings.log_level, log_file=settings.log_file)

    if not argv:
        logger.error("No command specified")
        click.echo(_usage_text(settings), err=True)
        return ExitStatus.USAGE

    command, args = argv[0], list(argv[1:])

    if command in HELP_COMMANDS:
        click.echo(_usage_text(settings))
        return ExitStatus.SUCCESS
    if command in VERSION_COMMANDS:
        click.echo(f"{settings.program_name} version {settings.version}")
        return ExitStatus.SUCCESS

    try:
        runtime = bootstrap(settings)
    except LoadError as e:
        logger.critical("Failed to initialize namespaces: %s", e)
        return e.exit_status

    router = CommandRouter(runtime, configure_logging=_logging_configurer(settings))
    return router.resolve_and_invoke(command, args)


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    },
    add_help_option=False,
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
def main(argv: tuple[str, ...]) -> None:
    """Run a Rootine command or library function."""
    try:
        status = run(argv)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        status = ExitStatus.TERMINATED
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        status = ExitStatus.SOFTWARE
    sys.exit(int(status))


if __name__ == "__main__":
    main()
