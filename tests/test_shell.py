"""Tests for the subprocess runner."""

import sys

import pytest

from ncsetup.errors import CommandError
from ncsetup.services.shell import REDACTED, redact, run_command


class TestRedact:
    def test_replaces_secret_substrings(self) -> None:
        args = ["mysql", "-e", "ALTER USER root IDENTIFIED BY 'hunter22';"]
        assert redact(args, ["hunter22"]) == [
            "mysql",
            "-e",
            f"ALTER USER root IDENTIFIED BY '{REDACTED}';",
        ]

    def test_empty_secret_ignored(self) -> None:
        assert redact(["a", "b"], [""]) == ["a", "b"]


class TestRunCommand:
    """Tests for run_command invariants."""

    def test_captures_output(self) -> None:
        result = run_command([sys.executable, "-c", "print('hello')"])
        assert result.ok
        assert result.exit_code == 0
        assert result.stdout == "hello\n"

    def test_nonzero_exit_raises_with_detail(self) -> None:
        code = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        with pytest.raises(CommandError) as exc_info:
            run_command([sys.executable, "-c", code])
        err = exc_info.value
        assert err.exit_code == 3
        assert err.stderr == "boom"
        assert str(err).endswith("exited with code 3: boom")

    def test_nonzero_exit_without_check(self) -> None:
        result = run_command([sys.executable, "-c", "import sys; sys.exit(2)"], check=False)
        assert not result.ok
        assert result.exit_code == 2

    def test_missing_command(self) -> None:
        with pytest.raises(CommandError, match="Command not found: nonexistent_command_xyz"):
            run_command(["nonexistent_command_xyz"])

    def test_timeout(self) -> None:
        with pytest.raises(CommandError, match="timed out after 1 seconds"):
            run_command([sys.executable, "-c", "import time; time.sleep(10)"], timeout=1)

    def test_input_and_env(self) -> None:
        code = "import os, sys; print(sys.stdin.read().upper() + os.environ['NC_TEST'])"
        result = run_command([sys.executable, "-c", code], input_text="abc", env={"NC_TEST": "1"})
        assert result.stdout == "ABC1\n"

    def test_secrets_redacted_from_error(self) -> None:
        code = "import sys; sys.stderr.write(sys.argv[1]); sys.exit(1)"
        with pytest.raises(CommandError) as exc_info:
            run_command([sys.executable, "-c", code, "pw=topsecret"], secrets=["topsecret"])
        err = exc_info.value
        assert "topsecret" not in str(err)
        assert "topsecret" not in " ".join(err.command)
        assert REDACTED in err.stderr
