"""
Common argument table — flags every command accepts.

Only this table supports single-letter short forms.
"""

from __future__ import annotations

from rootine.core.models.arguments import ArgumentSchema, ArgumentSpec

COMMON_ARGUMENTS = ArgumentSchema(
    ArgumentSpec(name="debug", short="d", description="Enable debug mode"),
    ArgumentSpec(name="help", short="h", description="Show help information"),
    ArgumentSpec(name="input", short="i", description="Specify input file", requires_value=True),
    ArgumentSpec(name="log", short="l", description="Specify log file", requires_value=True),
    ArgumentSpec(name="output", short="o", description="Specify output file", requires_value=True),
    ArgumentSpec(name="quiet", short="q", description="Enable quiet mode"),
    ArgumentSpec(name="version", short="v", description="Show version information"),
)
