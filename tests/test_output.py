"""Tests for output formatting."""

import io
import json

import pytest
from rich.console import Console

from ncsetup.models import StepOutcome, StepResult
from ncsetup.output import OutputContext


def _ctx(json_mode: bool = False) -> tuple[OutputContext, io.StringIO]:
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return OutputContext(console=console, json_mode=json_mode), output


class TestOutputContext:
    """Tests for OutputContext."""

    def test_print_in_normal_mode(self) -> None:
        ctx, output = _ctx()
        ctx.print("Hello world")
        assert "Hello world" in output.getvalue()

    def test_print_suppressed_in_json_mode(self) -> None:
        ctx, output = _ctx(json_mode=True)
        ctx.print("Hello world")
        ctx.print_plain("Hello world")
        assert output.getvalue() == ""

    def test_print_plain_keeps_brackets(self) -> None:
        ctx, output = _ctx()
        ctx.print_plain("[ok]   update-system")
        assert "[ok]   update-system" in output.getvalue()

    def test_error_message_not_parsed_as_markup(self) -> None:
        ctx, output = _ctx()
        ctx.error("Invalid override: [type=value_error]")
        assert "Error: Invalid override: [type=value_error]" in output.getvalue()

    def test_print_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        ctx, _ = _ctx(json_mode=True)
        ctx.print_json({"key": "value", "number": 42})
        data = json.loads(capsys.readouterr().out)
        assert data == {"key": "value", "number": 42}

    def test_error_in_json_mode(self, capsys: pytest.CaptureFixture[str]) -> None:
        ctx, _ = _ctx(json_mode=True)
        ctx.error("boom", {"step": "install-database"})
        data = json.loads(capsys.readouterr().out)
        assert data == {"error": "boom", "step": "install-database"}

    def test_print_json_suppressed_in_normal_mode(self, capsys: pytest.CaptureFixture[str]) -> None:
        ctx, _ = _ctx()
        ctx.print_json({"key": "value"})
        assert capsys.readouterr().out == ""

    def test_step_progress_lines(self) -> None:
        ctx, output = _ctx()
        ctx.step_progress(
            StepResult(name="install-php", outcome=StepOutcome.SUCCEEDED, index=3), total=19
        )
        ctx.step_progress(
            StepResult(
                name="update-system",
                outcome=StepOutcome.SKIPPED,
                detail="already satisfied",
                index=0,
            ),
            total=19,
        )
        lines = output.getvalue().splitlines()
        assert lines[0] == "✓ [4/19] install-php"
        assert lines[1] == "- [1/19] update-system (already satisfied)"

    def test_step_progress_suppressed_in_json_mode(self) -> None:
        ctx, output = _ctx(json_mode=True)
        ctx.step_progress(
            StepResult(name="install-php", outcome=StepOutcome.FAILED, index=3), total=19
        )
        assert output.getvalue() == ""
