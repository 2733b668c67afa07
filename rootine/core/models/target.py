"""
Command targets — what the router decided to execute.

A tagged variant built fresh for every invocation and never persisted.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class NamespacedFunction(BaseModel):
    """``lib::<namespace>::<function>`` call."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["namespaced"] = "namespaced"
    namespace: str
    function_name: str


class CommandScript(BaseModel):
    """A command module associated with a privilege level."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["script"] = "script"
    module: str                     # dotted import path
    command: str                    # name as typed by the caller


class BareFunction(BaseModel):
    """A library function called by its plain name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bare"] = "bare"
    namespace: str                  # namespace the function was found in
    name: str


CommandTarget = NamespacedFunction | CommandScript | BareFunction
