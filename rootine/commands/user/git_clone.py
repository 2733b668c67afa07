"""
Clone a Git repository.

    rootine git-clone <repository> [destination] [--depth N] [--branch NAME]
"""

from __future__ import annotations

from rootine.core.engine.router import InvocationContext
from rootine.core.models.arguments import ArgumentSchema, ArgumentSpec

ARGUMENTS = ArgumentSchema(
    ArgumentSpec(
        name="repository",
        description="Repository URL to clone",
        requires_value=True,
        pattern=r"^.+$",
    ),
    ArgumentSpec(name="destination", description="Destination directory", requires_value=True, default=""),
    ArgumentSpec(name="depth", description="Create a shallow clone with specified depth", requires_value=True, default="", pattern=r"^[1-9][0-9]*$"),
    ArgumentSpec(name="branch", description="Clone specific branch", requires_value=True, default=""),
    ArgumentSpec(name="bare", description="Create a bare repository"),
    ArgumentSpec(name="single-branch", description="Clone only one branch"),
    ArgumentSpec(
        name="recurse-submodules",
        description="Clone submodules",
        requires_value=True,
        default="true",
        pattern=r"^(true|false)$",
    ),
)


def main(context: InvocationContext) -> int:
    args = context.args
    options: list[str] = []
    if args.flag("bare"):
        options.append("--bare")
    if args.get("depth"):
        options += ["--depth", args["depth"]]
    if args.get("branch"):
        options += ["--branch", args["branch"]]
    if args.flag("single-branch"):
        options.append("--single-branch")
    options += ["--recurse-submodules", "true" if args.flag("recurse-submodules") else "false"]

    return context.call("git_clone", args["repository"], args.get("destination", ""), *options)
