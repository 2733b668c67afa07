"""
Tests for the library namespaces — common, root (apt-get, snap), user (git).
"""

from collections import namedtuple
from pathlib import Path
from unittest.mock import patch

import pytest

from rootine.core.errors import (
    LockTimeoutError,
    NetworkUnreachableError,
    PackageManagerBusyError,
    UsageError,
)
from rootine.core.models import Receipt
from rootine.core.reliability.lock import PackageManagerLock
from rootine.library.common import functions
from rootine.library.common import network as common_network
from rootine.library.root import apt_get, snap
from rootine.library.user import git

DiskUsage = namedtuple("DiskUsage", "total used free")

# ── common.functions ─────────────────────────────────────────────────


class TestCommonFunctions:
    def test_exports(self):
        assert set(functions.__all__) == {
            "alnum_str",
            "check_disk_space",
            "is_command_available",
            "is_lock_file_held",
            "is_package_installed",
            "is_process_running",
        }

    def test_command_available(self):
        assert functions.is_command_available("sh")

    def test_command_missing(self):
        assert not functions.is_command_available("sh definitely-not-a-command-xyz")

    def test_alnum_str(self, capsys):
        assert functions.alnum_str("my-value.1 x") == "my_value_1x"
        assert capsys.readouterr().out.strip() == "my_value_1x"

    def test_alnum_str_needs_input(self):
        with pytest.raises(UsageError):
            functions.alnum_str()

    def test_package_installed(self):
        ok = Receipt.success(["dpkg-query"], stdout="install ok installed")
        with patch.object(functions, "run_command", return_value=ok):
            assert functions.is_package_installed("curl")

    def test_package_not_installed(self):
        missing = Receipt.failure(["dpkg-query"], error="", return_code=1)
        with patch.object(functions, "run_command", return_value=missing):
            assert not functions.is_package_installed("curl")

    def test_disk_space_enough(self, settings):
        plenty = DiskUsage(0, 0, 20 * 1024**3)
        with patch.object(functions.shutil, "disk_usage", return_value=plenty):
            assert functions.check_disk_space("/", settings=settings)

    def test_disk_space_short(self, settings):
        little = DiskUsage(0, 0, 1024**3)
        with patch.object(functions.shutil, "disk_usage", return_value=little):
            assert not functions.check_disk_space("/", settings=settings)

    def test_disk_space_defaults_to_settings_paths(self, settings):
        seen = []

        def usage(path):
            seen.append(path)
            return DiskUsage(0, 0, 20 * 1024**3)

        with patch.object(functions.shutil, "disk_usage", side_effect=usage):
            functions.check_disk_space(settings=settings)
        assert seen == settings.disk_space_paths

    def test_disk_space_missing_path(self, settings, tmp_path):
        assert not functions.check_disk_space(str(tmp_path / "nope"), settings=settings)


class TestCommonNetwork:
    def test_uses_settings(self, settings):
        with patch.object(common_network, "_check", return_value=True) as check:
            assert common_network.check_internet_connection(settings=settings)
        check.assert_called_once_with(
            settings.ping_host, settings.ping_retries, settings.ping_timeout, interval=settings.ping_interval
        )

    def test_arguments_win(self, settings):
        with patch.object(common_network, "_check", return_value=True) as check:
            common_network.check_internet_connection("1.1.1.1", "5", "2", settings=settings)
        assert check.call_args[0] == ("1.1.1.1", "5", "2")


# ── root.apt_get ─────────────────────────────────────────────────────


@pytest.fixture
def apt(settings):
    """apt_get with connectivity faked and subprocess recorded."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return Receipt.success(cmd)

    with patch.object(apt_get, "require_internet_connection"), patch.object(
        apt_get, "run_command", side_effect=fake_run
    ):
        yield calls


class TestAptOptions:
    def test_update(self, settings):
        options = apt_get.apt_options("update", settings)
        assert options[0] == "--no-allow-insecure-repositories"
        assert "Acquire::Retries=3" in options
        assert f"DPkg::Lock::Timeout={int(settings.lock_timeout)}" in options

    def test_quiet(self, settings):
        quiet = settings.model_copy(update={"apt_quiet": True})
        assert apt_get.apt_options("clean", quiet)[0] == "-qq"

    def test_unknown_command(self, settings):
        with pytest.raises(UsageError, match="Invalid APT command: frobnicate"):
            apt_get.apt_options("frobnicate", settings)

    def test_every_command_has_lock_timeout(self, settings):
        for command in apt_get.APT_COMMAND_OPTIONS:
            assert any(o.startswith("DPkg::Lock::Timeout=") for o in apt_get.apt_options(command, settings))


class TestAptGetDo:
    def test_install(self, settings, apt):
        assert apt_get.apt_get_do("install", "curl", "git", settings=settings) == 0
        cmd, kwargs = apt[0]
        assert cmd[0] == "apt-get"
        assert cmd[-3:] == ["install", "curl", "git"]
        assert "-y" in cmd
        assert kwargs["env_overrides"]["DEBIAN_FRONTEND"] == "noninteractive"
        assert kwargs["env_overrides"]["LC_ALL"] == "C.UTF-8"

    def test_default_is_update(self, settings, apt):
        apt_get.apt_get_do(settings=settings)
        assert apt[0][0][-1] == "update"

    def test_runs_under_lock(self, settings):
        def fake_run(cmd, **kwargs):
            assert Path(settings.lock_file).exists()
            with pytest.raises(LockTimeoutError):
                PackageManagerLock(settings.lock_file, timeout=0.01, check_conflicts=False).acquire()
            return Receipt.success(cmd)

        with patch.object(apt_get, "require_internet_connection"), patch.object(
            apt_get, "run_command", side_effect=fake_run
        ):
            assert apt_get.apt_get_do("update", settings=settings) == 0

    def test_failure_code_propagated(self, settings):
        with patch.object(apt_get, "require_internet_connection"), patch.object(
            apt_get, "run_command", return_value=Receipt.failure(["apt-get"], error="x", return_code=100)
        ):
            assert apt_get.apt_get_do("install", "nope", settings=settings) == 100

    def test_offline(self, settings):
        with patch.object(
            apt_get, "require_internet_connection", side_effect=NetworkUnreachableError("offline")
        ), patch.object(apt_get, "run_command") as run:
            with pytest.raises(NetworkUnreachableError):
                apt_get.apt_get_do("update", settings=settings)
        run.assert_not_called()

    def test_unknown_command_before_network(self, settings):
        with patch.object(apt_get, "require_internet_connection") as online:
            with pytest.raises(UsageError):
                apt_get.apt_get_do("frobnicate", settings=settings)
        online.assert_not_called()


class TestAddAptRepository:
    def test_adds(self, settings, apt):
        with patch.object(apt_get.shutil, "which", return_value="/usr/bin/add-apt-repository"):
            assert apt_get.add_apt_repository("ppa:git-core/ppa", settings=settings) == 0
        assert apt[0][0] == ["add-apt-repository", "-y", "ppa:git-core/ppa"]

    def test_installs_helper_first(self, settings, apt):
        with patch.object(apt_get.shutil, "which", return_value=None):
            apt_get.add_apt_repository("ppa:x/y", settings=settings)
        assert apt[0][0][-2:] == ["install", "software-properties-common"]
        assert apt[1][0][0] == "add-apt-repository"


class TestCheckPackageManagerStatus:
    def test_idle(self):
        with patch.object(apt_get.process_status, "check_package_manager_status"):
            assert apt_get.check_package_manager_status()

    def test_busy(self):
        with patch.object(
            apt_get.process_status,
            "check_package_manager_status",
            side_effect=PackageManagerBusyError("busy"),
        ):
            assert not apt_get.check_package_manager_status()


# ── root.snap ────────────────────────────────────────────────────────


class TestSnap:
    def test_stop_not_running(self, settings):
        with patch.object(snap.process_status, "missing_commands", return_value=[]), patch.object(
            snap, "run_command", return_value=Receipt.failure(["pgrep"], error="", return_code=1)
        ) as run:
            assert snap.snap_stop(settings=settings)
        assert run.call_count == 1

    def test_stop_running(self, settings):
        with patch.object(snap.process_status, "missing_commands", return_value=[]), patch.object(
            snap, "run_command", return_value=Receipt.success(["x"])
        ) as run:
            assert snap.snap_stop(settings=settings)
        assert run.call_args[0][0] == ["killall", "-q", "-w", "snap-store"]

    def test_refresh_retries(self, settings):
        results = iter([Receipt.failure(["snap"], error="", return_code=1), Receipt.success(["snap"])])
        with patch.object(snap.process_status, "missing_commands", return_value=[]), patch.object(
            snap, "require_internet_connection"
        ), patch.object(snap, "run_command", side_effect=lambda *a, **k: next(results)):
            assert snap.snap_refresh(settings=settings)

    def test_refresh_gives_up(self, settings):
        with patch.object(snap.process_status, "missing_commands", return_value=[]), patch.object(
            snap, "require_internet_connection"
        ), patch.object(
            snap, "run_command", return_value=Receipt.failure(["snap"], error="", return_code=1)
        ) as run:
            assert not snap.snap_refresh(settings=settings)
        assert run.call_count == settings.snap_refresh_retries


# ── user.git ─────────────────────────────────────────────────────────


class TestGitClone:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://github.com/nvm-sh/nvm.git", "nvm"),
            ("https://github.com/nvm-sh/nvm", "nvm"),
            ("ssh://git@host/group/repo.git/", "repo"),
        ],
    )
    def test_derive_destination(self, url, expected):
        assert git.derive_destination(url) == expected

    def test_invalid_url(self):
        with pytest.raises(UsageError, match="Invalid repository URL"):
            git.git_clone("github.com/x/y")

    def test_clone_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch.object(git, "run_command", return_value=Receipt.success(["git"])) as run:
            assert git.git_clone("https://example.com/x/repo.git")
        assert run.call_args[0][0] == [
            "git", "clone", "--recurse-submodules", "https://example.com/x/repo.git", "repo",
        ]

    def test_clone_options(self, tmp_path):
        dest = str(tmp_path / "dst")
        with patch.object(git, "run_command", return_value=Receipt.success(["git"])) as run:
            git.git_clone(
                "https://example.com/r.git", dest,
                "--depth", "1", "--branch", "main", "--recurse-submodules", "false",
            )
        assert run.call_args[0][0] == [
            "git", "clone", "--depth", "1", "--branch", "main", "https://example.com/r.git", dest,
        ]

    def test_options_without_destination(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch.object(git, "run_command", return_value=Receipt.success(["git"])) as run:
            git.git_clone("https://example.com/r.git", "--bare")
        assert run.call_args[0][0][2] == "--bare"
        assert run.call_args[0][0][-1] == "r"

    def test_bad_depth(self):
        with pytest.raises(UsageError, match="Depth"):
            git.git_clone("https://example.com/r.git", "d", "--depth", "0")

    def test_unknown_option(self):
        with pytest.raises(UsageError, match="Invalid argument '--mirror'"):
            git.git_clone("https://example.com/r.git", "d", "--mirror")

    def test_non_empty_destination(self, tmp_path):
        (tmp_path / "file").write_text("x")
        with patch.object(git, "run_command") as run:
            assert not git.git_clone("https://example.com/r.git", str(tmp_path))
        run.assert_not_called()

    def test_clone_failure(self, tmp_path):
        with patch.object(git, "run_command", return_value=Receipt.failure(["git"], error="", return_code=128)):
            assert not git.git_clone("https://example.com/r.git", str(tmp_path / "d"))
