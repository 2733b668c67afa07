"""
Shared test fixtures and configuration.
"""

import logging
import sys
import textwrap
from pathlib import Path

import pytest

from rootine.core.config.settings import Settings
from rootine.core.engine.loader import Runtime, bootstrap
from rootine.core.models.privilege import PrivilegeLevel

FAKE_LIBRARY = "fakelib"
FAKE_COMMANDS = "fakecmds"


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content))


def _purge(*prefixes: str) -> None:
    for name in list(sys.modules):
        if any(name == p or name.startswith(p + ".") for p in prefixes):
            del sys.modules[name]


@pytest.fixture(autouse=True)
def _restore_logging():
    """setup_logging replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.raiseExceptions = True


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with the lock in a temp dir and no host probing."""
    return Settings(
        lock_file=str(tmp_path / "lock-frontend"),
        lock_timeout=1.0,
        lock_poll_interval=0.01,
        check_conflicts=False,
        ping_interval=0,
        snap_refresh_delay=0,
    )


@pytest.fixture
def fake_packages(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A throwaway library and command tree importable from sys.path.

    Layout::

        fakelib/common/basics.py   greet, fail, echo_args, shared, needs_settings, takes_one
        fakelib/root/admin.py      reboot, shared
        fakelib/user/tools.py      whoami, shared, needs_name
        fakecmds/root/wipe_disk.py
        fakecmds/user/install_nodejs.py
        fakecmds/user/needs_name.py
    """
    root = tmp_path / "pkgs"
    _write(root / FAKE_LIBRARY / "__init__.py", "")
    for ns in ("common", "root", "user"):
        _write(root / FAKE_LIBRARY / ns / "__init__.py", "")

    _write(root / FAKE_LIBRARY / "common" / "basics.py", """\
        __all__ = ["greet", "fail", "echo_args", "shared", "needs_settings", "takes_one"]

        CALLS = []


        def greet(*args):
            CALLS.append(("greet", args))
            return None


        def fail():
            return False


        def echo_args(*args):
            CALLS.append(("echo_args", args))
            return len(args)


        def shared():
            return 11


        def needs_settings(*, settings):
            CALLS.append(("needs_settings", settings.lock_file))
            return True


        def takes_one(name, *, settings):
            return 0


        def not_exported():
            return 0
    """)
    _write(root / FAKE_LIBRARY / "root" / "admin.py", """\
        __all__ = ["reboot", "shared"]


        def reboot():
            return 0


        def shared():
            return 22
    """)
    _write(root / FAKE_LIBRARY / "user" / "tools.py", """\
        __all__ = ["whoami", "shared", "needs_name"]


        def whoami():
            return 0


        def needs_name():
            return 99


        def shared():
            return 33
    """)

    _write(root / FAKE_COMMANDS / "__init__.py", "")
    for level in ("root", "user"):
        _write(root / FAKE_COMMANDS / level / "__init__.py", "")

    _write(root / FAKE_COMMANDS / "root" / "wipe_disk.py", """\
        \"\"\"Pretend to wipe a disk.\"\"\"

        from rootine.core.models.arguments import ArgumentSchema

        ARGUMENTS = ArgumentSchema()


        def main(context):
            return 0
    """)
    _write(root / FAKE_COMMANDS / "user" / "install_nodejs.py", """\
        \"\"\"Install nvm and Node.js.\"\"\"

        from rootine.core.models.arguments import ArgumentSpec, ArgumentSchema

        ARGUMENTS = ArgumentSchema(
            ArgumentSpec(
                name="nvm-version",
                description="nvm version to install",
                requires_value=True,
                default="v0.40.1",
                pattern=r"^v[0-9]+\\.[0-9]+\\.[0-9]+$",
            ),
            ArgumentSpec(
                name="node-version",
                description="Node.js version to install",
                requires_value=True,
                default="22",
                pattern=r"^([0-9]+|lts/[a-zA-Z]+|latest)$",
            ),
        )

        SEEN = []


        def main(context):
            SEEN.append(context)
            return 42
    """)
    _write(root / FAKE_COMMANDS / "user" / "needs_name.py", """\
        \"\"\"Needs a name.\"\"\"

        from rootine.core.models.arguments import ArgumentSchema

        ARGUMENTS = ArgumentSchema.from_table({
            "name": "Name to use:1::^[a-z]+$",
            "city": "City to use:1::",
        })


        def main(context):
            return context.call("greet", context.args["name"])
    """)

    _purge(FAKE_LIBRARY, FAKE_COMMANDS)
    monkeypatch.syspath_prepend(str(root))
    yield root
    _purge(FAKE_LIBRARY, FAKE_COMMANDS)


@pytest.fixture
def fake_settings(settings: Settings, fake_packages: Path) -> Settings:
    """Settings pointing the loader and router at the fake packages."""
    return settings.model_copy(update={
        "library_package": FAKE_LIBRARY,
        "commands_package": FAKE_COMMANDS,
        "namespaces": {
            "common": ["basics"],
            "root": ["admin"],
            "user": ["tools"],
        },
    })


@pytest.fixture
def user_runtime(fake_settings: Settings) -> Runtime:
    return bootstrap(fake_settings, PrivilegeLevel.STANDARD)


@pytest.fixture
def root_runtime(fake_settings: Settings) -> Runtime:
    return bootstrap(fake_settings, PrivilegeLevel.ELEVATED)
