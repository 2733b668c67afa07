"""
Argument models — the declarative schema and its bound result.

``ArgumentSpec`` is one entry of a schema table. ``ArgumentSchema`` is
the ordered table a command declares (or the fixed common table).
``BoundArguments`` is the read-only mapping the binder produces once
per invocation.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Value bound for a presence-only switch.
FLAG_TRUE = "true"


def alnum_key(name: str) -> str:
    """Turn an argument name into an identifier (``nvm-version`` → ``nvm_version``)."""
    return re.sub(r"[^0-9A-Za-z]", "_", "".join(name.split()))


class ArgumentSpec(BaseModel):
    """One flag or positional slot of a schema table.

    An entry with ``requires_value`` and no ``default`` is required:
    binding fails when the caller omits it.
    An empty-string ``default`` counts as a default (optional, bound
    to ""); the encoded form treats an empty field as no default.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    requires_value: bool = False
    default: str | None = None
    pattern: str | None = None
    short: str | None = None        # only honoured in the common table

    @field_validator("pattern", mode="before")
    @classmethod
    def _empty_is_none(cls, value: str | None) -> str | None:
        if value == "":
            return None
        return value

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid validation pattern {value!r}: {e}") from e
        return value

    @field_validator("short")
    @classmethod
    def _short_is_one_char(cls, value: str | None) -> str | None:
        if value is not None and len(value) != 1:
            raise ValueError(f"short form must be a single character, got {value!r}")
        return value

    @property
    def required(self) -> bool:
        """Whether binding fails when the caller omits this argument."""
        return self.requires_value and self.default is None

    @property
    def long_form(self) -> str:
        return f"--{self.name}"

    @classmethod
    def parse(cls, name: str, encoded: str, short: str | None = None) -> ArgumentSpec:
        """Build a spec from ``description:requires_value:default:pattern``.

        The pattern is the last field, so it may itself contain colons.
        Missing trailing fields are treated as empty.
        """
        parts = encoded.split(":", 3)
        parts += [""] * (4 - len(parts))
        description, requires_value, default, pattern = parts
        return cls(
            name=name,
            description=description,
            requires_value=requires_value.strip() == "1",
            default=default or None,
            pattern=pattern,
            short=short,
        )


class ArgumentSchema:
    """An ordered, immutable table of ``ArgumentSpec`` entries.

    Declaration order defines positional slots; help output uses
    sorted order.
    """

    def __init__(self, *specs: ArgumentSpec):
        entries: dict[str, ArgumentSpec] = {}
        shorts: dict[str, str] = {}
        for spec in specs:
            if spec.name in entries:
                raise ValueError(f"duplicate argument name: {spec.name}")
            entries[spec.name] = spec
            if spec.short is not None:
                if spec.short in shorts:
                    raise ValueError(f"duplicate short form: -{spec.short}")
                shorts[spec.short] = spec.name
        self._entries = MappingProxyType(entries)
        self._shorts = MappingProxyType(shorts)

    @classmethod
    def from_table(cls, table: Mapping[str, str]) -> ArgumentSchema:
        """Build a schema from a mapping of name → encoded spec string."""
        return cls(*(ArgumentSpec.parse(name, encoded) for name, encoded in table.items()))

    def __iter__(self) -> Iterator[ArgumentSpec]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        return f"<ArgumentSchema {list(self._entries)}>"

    def get(self, name: str) -> ArgumentSpec | None:
        return self._entries.get(name)

    def by_short(self, short: str) -> ArgumentSpec | None:
        name = self._shorts.get(short)
        return self._entries[name] if name is not None else None

    def sorted(self) -> list[ArgumentSpec]:
        """Entries in stable help order (short form, then name)."""
        return sorted(self._entries.values(), key=lambda s: (s.short or s.name, s.name))

    def defaults(self) -> dict[str, str]:
        return {s.name: s.default for s in self if s.default is not None}


class BoundArguments(Mapping[str, str]):
    """Argument name → resolved string value for one invocation.

    Read-only after construction. Positional tokens that did not fit
    any schema slot are kept in ``extra``.
    """

    def __init__(self, values: Mapping[str, str] | None = None, extra: Iterable[str] = ()):
        self._values = MappingProxyType(dict(values or {}))
        self._extra = tuple(extra)

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BoundArguments({dict(self._values)!r}, extra={self._extra!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BoundArguments):
            return dict(self._values) == dict(other._values) and self._extra == other._extra
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @property
    def extra(self) -> tuple[str, ...]:
        return self._extra

    def flag(self, name: str) -> bool:
        """Interpret a switch or ``true``/``false`` value as a bool."""
        return self._values.get(name, "").lower() in (FLAG_TRUE, "1", "yes")

    def as_identifiers(self) -> dict[str, str]:
        """Values keyed by identifier-safe names."""
        return {alnum_key(k): v for k, v in self._values.items()}


class CommonOptions(BaseModel):
    """Result of consuming the common flags."""

    model_config = ConfigDict(frozen=True)

    debug: bool = False
    help: bool = False
    version: bool = False
    quiet: bool = False
    input_file: str | None = None
    log_file: str | None = None
    output_file: str | None = None
    remaining: tuple[str, ...] = Field(default_factory=tuple)
