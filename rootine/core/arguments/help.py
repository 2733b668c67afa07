"""
Help rendering for the common and command argument tables.

Entries are listed in sorted order so the output is stable.
"""

from __future__ import annotations

from rootine.core.models.arguments import ArgumentSchema


def render_common_help(schema: ArgumentSchema) -> str:
    lines = ["Common arguments:"]
    for spec in schema.sorted():
        long_form = f"{spec.name} <value>" if spec.requires_value else spec.name
        prefix = f"-{spec.short}, " if spec.short else "    "
        lines.append(f"  {prefix}--{long_form:<20} {spec.description}")
    return "\n".join(lines)


def render_command_help(schema: ArgumentSchema) -> str:
    lines = ["Command arguments:"]
    if len(schema) == 0:
        lines.append("  (none)")
    for spec in sorted(schema, key=lambda s: s.name):
        arg_string = spec.long_form + (" <value>" if spec.requires_value else "")
        default = f" (default: {spec.default})" if spec.default else ""
        lines.append(f"  {arg_string:<26} {spec.description}{default}")
    return "\n".join(lines)


def render_help(
    common: ArgumentSchema,
    command: ArgumentSchema | None = None,
    header: str = "",
) -> str:
    """Full help text: optional header, common table, command table."""
    sections = []
    if header:
        sections.append(header.strip())
    sections.append(render_common_help(common))
    if command is not None:
        sections.append(render_command_help(command))
    return "\n\n".join(sections) + "\n"
