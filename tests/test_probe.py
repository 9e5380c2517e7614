"""Tests for host state probing."""

import os
import pwd
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ncsetup.errors import CommandError
from ncsetup.models import ProbeResult
from ncsetup.services.probe import LocalHostProbe, all_of, probe_call

T, F, U = ProbeResult.TRUE, ProbeResult.FALSE, ProbeResult.UNKNOWN


def _current_user() -> str:
    return pwd.getpwuid(os.getuid()).pw_name


class TestAllOf:
    @pytest.mark.parametrize(
        ("results", "expected"),
        [
            ((), T),
            ((T, T), T),
            ((T, F), F),
            ((U, F), F),
            ((T, U), U),
        ],
    )
    def test_combination(self, results: tuple[ProbeResult, ...], expected: ProbeResult) -> None:
        assert all_of(*results) is expected


class TestProbeCall:
    def test_bool_result(self) -> None:
        assert probe_call(lambda x: x > 1, 2) is T
        assert probe_call(lambda x: x > 1, 0) is F

    def test_command_error_is_unknown(self) -> None:
        def failing() -> bool:
            raise CommandError("mysql exited with code 1")

        assert probe_call(failing) is U

    def test_os_error_is_unknown(self) -> None:
        def failing() -> bool:
            raise PermissionError("denied")

        assert probe_call(failing) is U

    def test_other_errors_propagate(self) -> None:
        def failing() -> bool:
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            probe_call(failing)


class TestLocalHostProbe:
    """Tests for LocalHostProbe against the real filesystem."""

    def test_file_exists(self, tmp_path: Path) -> None:
        probe = LocalHostProbe()
        (tmp_path / "f").write_text("x")
        assert probe.file_exists(tmp_path / "f") is T
        assert probe.file_exists(tmp_path / "missing") is F

    def test_path_is_directory(self, tmp_path: Path) -> None:
        probe = LocalHostProbe()
        (tmp_path / "f").write_text("x")
        assert probe.path_is_directory(tmp_path) is T
        assert probe.path_is_directory(tmp_path / "f") is F
        assert probe.path_is_directory(tmp_path / "missing") is F

    @pytest.mark.skipif(os.geteuid() == 0, reason="root bypasses permission checks")
    def test_unreadable_parent_is_unknown(self, tmp_path: Path) -> None:
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "f").write_text("x")
        locked.chmod(0)
        try:
            assert LocalHostProbe().file_exists(locked / "f") is U
        finally:
            locked.chmod(0o755)

    def test_path_owned_by(self, tmp_path: Path) -> None:
        probe = LocalHostProbe()
        assert probe.path_owned_by(tmp_path, _current_user()) is T
        assert probe.path_owned_by(tmp_path / "missing", _current_user()) is F

    def test_unknown_user_is_unknown(self, tmp_path: Path) -> None:
        assert LocalHostProbe().path_owned_by(tmp_path, "no_such_user_xyz") is U

    def test_path_has_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "data"
        target.mkdir()
        target.chmod(0o750)
        probe = LocalHostProbe()
        assert probe.path_has_mode(target, 0o750) is T
        assert probe.path_has_mode(target, 0o755) is F
        assert probe.path_has_mode(tmp_path / "missing", 0o750) is F

    def test_read_text(self, tmp_path: Path) -> None:
        (tmp_path / "php.ini").write_text("memory_limit = 128M\n")
        probe = LocalHostProbe()
        assert probe.read_text(tmp_path / "php.ini") == "memory_limit = 128M\n"
        assert probe.read_text(tmp_path / "missing") is None

    def test_package_and_service_queries(self) -> None:
        packages = MagicMock()
        packages.is_installed.side_effect = lambda name: name == "apache2"
        services = MagicMock()
        services.is_active.side_effect = CommandError("Command not found: systemctl")
        probe = LocalHostProbe(packages, services)

        assert probe.package_installed("apache2") is T
        assert probe.package_installed("php") is F
        assert probe.service_active("apache2") is U
