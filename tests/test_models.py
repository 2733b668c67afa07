"""
Tests for domain models — argument specs, schemas, bound values,
privilege levels, receipts.
"""

import pytest
from pydantic import ValidationError

from rootine.core.models import (
    ArgumentSchema,
    ArgumentSpec,
    BoundArguments,
    ExitStatus,
    PrivilegeLevel,
    Receipt,
    all_namespaces,
    alnum_key,
)

# ── ArgumentSpec ─────────────────────────────────────────────────────


class TestArgumentSpec:
    def test_required_when_value_and_no_default(self):
        spec = ArgumentSpec(name="name", requires_value=True)
        assert spec.required

    def test_not_required_with_default(self):
        spec = ArgumentSpec(name="name", requires_value=True, default="x")
        assert not spec.required

    def test_empty_default_is_still_a_default(self):
        spec = ArgumentSpec(name="destination", requires_value=True, default="")
        assert not spec.required

    def test_switch_never_required(self):
        assert not ArgumentSpec(name="bare").required

    def test_long_form(self):
        assert ArgumentSpec(name="node-version").long_form == "--node-version"

    def test_frozen(self):
        spec = ArgumentSpec(name="name")
        with pytest.raises(ValidationError):
            spec.name = "other"

    def test_invalid_pattern_rejected(self):
        with pytest.raises(ValidationError):
            ArgumentSpec(name="bad", pattern="^(unclosed$")

    def test_short_must_be_one_char(self):
        with pytest.raises(ValidationError):
            ArgumentSpec(name="debug", short="dd")


class TestArgumentSpecParse:
    def test_full_encoding(self):
        spec = ArgumentSpec.parse(
            "restart-xrdp",
            "Restart XRDP service after installation:0:true:^(true|false)$",
        )
        assert spec.description == "Restart XRDP service after installation"
        assert spec.requires_value is False
        assert spec.default == "true"
        assert spec.pattern == "^(true|false)$"

    def test_pattern_may_contain_colons(self):
        spec = ArgumentSpec.parse("url", "URL:1::^https?://[a-z]+:[0-9]+$")
        assert spec.pattern == "^https?://[a-z]+:[0-9]+$"

    def test_empty_fields_are_absent(self):
        spec = ArgumentSpec.parse("destination", "Destination directory:1::")
        assert spec.default is None
        assert spec.pattern is None
        assert spec.required

    def test_missing_trailing_fields(self):
        spec = ArgumentSpec.parse("bare", "Create a bare repository")
        assert spec.requires_value is False
        assert spec.default is None


# ── ArgumentSchema ───────────────────────────────────────────────────


class TestArgumentSchema:
    def test_declaration_order_kept(self):
        schema = ArgumentSchema(
            ArgumentSpec(name="zeta"),
            ArgumentSpec(name="alpha"),
        )
        assert [s.name for s in schema] == ["zeta", "alpha"]

    def test_sorted_uses_short_then_name(self):
        schema = ArgumentSchema(
            ArgumentSpec(name="version", short="v"),
            ArgumentSpec(name="debug", short="d"),
            ArgumentSpec(name="help", short="h"),
        )
        assert [s.name for s in schema.sorted()] == ["debug", "help", "version"]

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError, match="duplicate argument name"):
            ArgumentSchema(ArgumentSpec(name="a"), ArgumentSpec(name="a"))

    def test_duplicate_short_rejected(self):
        with pytest.raises(ValueError, match="duplicate short form"):
            ArgumentSchema(
                ArgumentSpec(name="a", short="x"),
                ArgumentSpec(name="b", short="x"),
            )

    def test_by_short(self):
        schema = ArgumentSchema(ArgumentSpec(name="quiet", short="q"))
        assert schema.by_short("q").name == "quiet"
        assert schema.by_short("z") is None

    def test_from_table(self):
        schema = ArgumentSchema.from_table({
            "upgrade-type": "Type of upgrade to perform:1:safe:^(full|safe)$",
            "clean": "Clean package cache:0:true:",
        })
        assert "upgrade-type" in schema
        assert schema.get("clean").default == "true"
        assert len(schema) == 2

    def test_defaults(self):
        schema = ArgumentSchema(
            ArgumentSpec(name="a", requires_value=True, default="1"),
            ArgumentSpec(name="b", requires_value=True),
        )
        assert schema.defaults() == {"a": "1"}


# ── BoundArguments ───────────────────────────────────────────────────


class TestBoundArguments:
    def test_mapping_access(self):
        bound = BoundArguments({"node-version": "22"})
        assert bound["node-version"] == "22"
        assert dict(bound) == {"node-version": "22"}

    def test_read_only(self):
        bound = BoundArguments({"a": "1"})
        with pytest.raises(TypeError):
            bound["a"] = "2"  # type: ignore[index]

    def test_source_mapping_not_shared(self):
        source = {"a": "1"}
        bound = BoundArguments(source)
        source["a"] = "2"
        assert bound["a"] == "1"

    def test_equals_plain_mapping(self):
        assert BoundArguments({"a": "1"}) == {"a": "1"}

    def test_extra(self):
        bound = BoundArguments({}, extra=["x", "y"])
        assert bound.extra == ("x", "y")

    def test_flag(self):
        bound = BoundArguments({"yes": "true", "no": "false"})
        assert bound.flag("yes")
        assert not bound.flag("no")
        assert not bound.flag("missing")

    def test_as_identifiers(self):
        bound = BoundArguments({"nvm-version": "v0.40.1"})
        assert bound.as_identifiers() == {"nvm_version": "v0.40.1"}


class TestAlnumKey:
    def test_dash(self):
        assert alnum_key("nvm-version") == "nvm_version"

    def test_whitespace_removed(self):
        assert alnum_key("my arg.name") == "myarg_name"


# ── Privilege ────────────────────────────────────────────────────────


class TestPrivilegeLevel:
    def test_namespaces(self):
        assert PrivilegeLevel.ELEVATED.namespace == "root"
        assert PrivilegeLevel.STANDARD.namespace == "user"

    def test_everyone_reaches_common(self):
        for level in PrivilegeLevel:
            assert level.may_access("common")

    def test_levels_are_isolated(self):
        assert not PrivilegeLevel.STANDARD.may_access("root")
        assert not PrivilegeLevel.ELEVATED.may_access("user")

    def test_all_namespaces(self):
        assert all_namespaces() == ("common", "root", "user")


# ── Receipt ──────────────────────────────────────────────────────────


class TestReceipt:
    def test_success(self):
        r = Receipt.success(["true"], stdout="ok")
        assert r.ok
        assert r.exit_status == 0

    def test_failure_with_code(self):
        r = Receipt.failure(["false"], error="boom", return_code=3)
        assert r.failed
        assert r.exit_status == 3

    def test_failure_without_code(self):
        assert Receipt.failure(["x"], error="never ran").exit_status == 1


class TestExitStatus:
    def test_sysexits_values(self):
        assert ExitStatus.USAGE == 64
        assert ExitStatus.NOPERM == 77
        assert ExitStatus.CONFIG == 78
        assert ExitStatus.NETWORK_UNREACHABLE == 92
        assert ExitStatus.COMMAND_NOT_FOUND == 127
        assert ExitStatus.TERMINATED == 130
