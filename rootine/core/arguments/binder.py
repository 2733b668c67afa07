"""
Argument binder — tokens + schema tables → bound values.

Binding happens in two passes over the tokens that follow the command
name:

    1. Common flags (``-x`` or ``--name``) are consumed until the first
       token that is not a recognized common flag.
    2. The rest is bound against the command's own table. Only long
       forms are accepted there; short forms are a usage error.

For the command table, defaults are applied first, then positional
tokens (in declaration order), then explicit ``--name value`` pairs.
Nothing is returned unless every step succeeds, so a failed bind never
leaves partial results behind.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rootine.core.arguments.common import COMMON_ARGUMENTS
from rootine.core.arguments.help import render_help
from rootine.core.arguments.validator import validate_value
from rootine.core.errors import UsageError
from rootine.core.models.arguments import (
    FLAG_TRUE,
    ArgumentSchema,
    ArgumentSpec,
    BoundArguments,
    CommonOptions,
)

logger = logging.getLogger(__name__)


def _usage(
    message: str,
    common: ArgumentSchema,
    command: ArgumentSchema | None,
) -> UsageError:
    return UsageError(message, help_text=render_help(common, command))


def _lookup_common(token: str, schema: ArgumentSchema) -> ArgumentSpec | None:
    if token.startswith("--"):
        return schema.get(token[2:])
    if token.startswith("-") and len(token) == 2:
        return schema.by_short(token[1])
    return None


# ── Pass 1: common flags ────────────────────────────────────────


def bind_common(
    tokens: Sequence[str],
    schema: ArgumentSchema = COMMON_ARGUMENTS,
    command_schema: ArgumentSchema | None = None,
) -> CommonOptions:
    """Consume leading common flags.

    Stops at the first token that is not a recognized common flag, or
    right after ``help``/``version`` so nothing else gets bound.

    Raises:
        UsageError: A common flag that needs a value is last.
    """
    values: dict[str, str] = {}
    index = 0

    while index < len(tokens):
        token = tokens[index]
        spec = _lookup_common(token, schema)
        if spec is None:
            break

        if spec.requires_value:
            if index + 1 >= len(tokens):
                raise _usage(f"Missing value for {token}", schema, command_schema)
            value = tokens[index + 1]
            if not validate_value(value, spec.pattern):
                raise _usage(f"Invalid value for {token}: {value}", schema, command_schema)
            values[spec.name] = value
            index += 2
        else:
            values[spec.name] = FLAG_TRUE
            index += 1

        if spec.name in ("help", "version"):
            break

    return CommonOptions(
        debug="debug" in values,
        help="help" in values,
        version="version" in values,
        quiet="quiet" in values,
        input_file=values.get("input"),
        log_file=values.get("log"),
        output_file=values.get("output"),
        remaining=tuple(tokens[index:]),
    )


# ── Pass 2: command-specific arguments ──────────────────────────


def bind_command(
    schema: ArgumentSchema,
    tokens: Sequence[str],
    common_schema: ArgumentSchema = COMMON_ARGUMENTS,
) -> BoundArguments:
    """Bind the command's own arguments.

    Raises:
        UsageError: Unknown or short-form flag, missing or invalid value,
            or one or more required arguments absent. Every missing
            required argument is named in a single error.
    """
    explicit: dict[str, str] = {}
    positional: list[str] = []
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if token.startswith("--") and len(token) > 2:
            name = token[2:]
            spec = schema.get(name)
            if spec is None:
                if name in common_schema:
                    raise _usage(
                        f"Common argument {token} used in command section; "
                        "place it before the command arguments",
                        common_schema,
                        schema,
                    )
                raise _usage(f"Unknown option: {token}", common_schema, schema)

            if spec.requires_value:
                if index + 1 >= len(tokens):
                    raise _usage(f"Missing value for {token}", common_schema, schema)
                value = tokens[index + 1]
                if not validate_value(value, spec.pattern):
                    raise _usage(f"Invalid value for {token}: {value}", common_schema, schema)
                explicit[name] = value
                index += 2
            else:
                explicit[name] = FLAG_TRUE
                index += 1

        elif token.startswith("-") and len(token) > 1:
            raise _usage(
                f"Short options are not supported for command arguments: {token}",
                common_schema,
                schema,
            )

        else:
            positional.append(token)
            index += 1

    # Positional tokens fill the value slots not set explicitly, in
    # declaration order; switches never take a positional
    slots = [spec for spec in schema if spec.requires_value and spec.name not in explicit]
    from_position: dict[str, str] = {}
    for spec, value in zip(slots, positional):
        if not validate_value(value, spec.pattern):
            raise _usage(
                f"Invalid value for {spec.long_form}: {value}",
                common_schema,
                schema,
            )
        from_position[spec.name] = value
    extra = positional[len(slots):]

    values = schema.defaults()
    values.update(from_position)
    values.update(explicit)

    missing = [spec for spec in schema if spec.required and not values.get(spec.name)]
    if missing:
        listed = ", ".join(f"{s.long_form} ({s.description})" for s in missing)
        raise _usage(f"Required argument(s) missing: {listed}", common_schema, schema)

    logger.debug("Bound arguments: %s (extra=%s)", values, extra)
    return BoundArguments(values, extra=extra)


def bind(
    command_schema: ArgumentSchema,
    global_schema: ArgumentSchema,
    raw_args: Sequence[str],
) -> BoundArguments:
    """Bind raw tokens against the common and command tables."""
    options = bind_common(raw_args, global_schema, command_schema)
    return bind_command(command_schema, options.remaining, global_schema)
