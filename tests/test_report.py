"""Tests for run reports and run records."""

import json
import stat
from pathlib import Path

import pytest

from ncsetup.core import latest_run, list_runs, render_report, report_data, save_run
from ncsetup.core.report import ROTATE_NOTICE, STORE_NOTICE
from ncsetup.models import (
    Credential,
    CredentialSource,
    HostTarget,
    PipelineRun,
    StepOutcome,
    StepResult,
)


def _credential(label: str, username: str, secret: str, applied_by: str, **kw: bool) -> Credential:
    return Credential(
        label=label,
        username=username,
        secret=secret,
        source=CredentialSource.GENERATED,
        applied_by=applied_by,
        **kw,
    )


def _run(*results: StepResult, planned: list[str] | None = None) -> PipelineRun:
    return PipelineRun(
        run_id="20250101-120000",
        host=HostTarget(hostname="cloud", address="cloud.example.com"),
        access_url="https://cloud.example.com",
        planned=planned or [r.name for r in results],
        results={r.name: r for r in results},
        credentials={
            "admin": _credential("admin", "admin", "adm1n-Secret", "install-application"),
            "database": _credential("database", "nextcloud_user", "db-Secret-1", "create-database"),
        },
    )


def _ok(name: str, index: int) -> StepResult:
    return StepResult(name=name, outcome=StepOutcome.SUCCEEDED, index=index)


def _skipped(name: str, index: int) -> StepResult:
    return StepResult(
        name=name, outcome=StepOutcome.SKIPPED, index=index, detail="already satisfied"
    )


class TestRenderReport:
    """Tests for render_report."""

    def test_successful_run(self) -> None:
        run = _run(_ok("create-database", 0), _ok("install-application", 1))

        report = render_report(run)

        assert "Installation completed successfully." in report
        assert "URL: https://cloud.example.com" in report
        assert "adm1n-Secret" in report
        assert "db-Secret-1" in report
        assert STORE_NOTICE in report
        assert ROTATE_NOTICE in report

    def test_credentials_from_previous_run_not_shown(self) -> None:
        run = _run(_skipped("create-database", 0), _ok("install-application", 1))

        report = render_report(run)

        assert "db-Secret-1" not in report
        assert "Database user (nextcloud_user): unchanged" in report
        assert "adm1n-Secret" in report

    def test_skip_reason_listed(self) -> None:
        report = render_report(_run(_skipped("create-database", 0)))
        assert "create-database (already satisfied)" in report

    def test_failed_run(self) -> None:
        failed = StepResult(
            name="install-application",
            outcome=StepOutcome.FAILED,
            index=1,
            reason="php exited with code 1: Database error",
            error_type="CommandError",
        )
        run = _run(
            _ok("create-database", 0),
            failed,
            planned=["create-database", "install-application", "enable-apps"],
        )

        report = render_report(run)

        assert "FAILED at step install-application: php exited with code 1" in report
        assert "enable-apps (not run)" in report
        assert "completed successfully" not in report
        assert "db-Secret-1" in report
        assert "adm1n-Secret" not in report

    def test_insecure_credentials_flagged(self) -> None:
        run = _run(_ok("install-application", 0))
        run.credentials["admin"] = _credential(
            "admin", "admin", "admin", "install-application", insecure=True
        )

        report = render_report(run)

        assert "[INSECURE DEFAULT]" in report

    def test_warnings_listed(self) -> None:
        run = _run(_ok("create-database", 0))
        run.warnings.append("No public domain detected (192.0.2.10); skipping TLS certificate.")
        assert "  - No public domain detected" in render_report(run)


class TestReportData:
    def test_secrets_only_for_applied_credentials(self) -> None:
        run = _run(_skipped("create-database", 0), _ok("install-application", 1))

        data = report_data(run)

        assert data["success"] is True
        assert data["failed_step"] is None
        assert data["credentials"]["admin"]["secret"] == "adm1n-Secret"
        assert data["credentials"]["database"]["secret"] is None
        assert data["credentials"]["database"]["applied"] is False
        assert [s["outcome"] for s in data["steps"]] == ["skipped", "succeeded"]
        json.dumps(data)


class TestRunStore:
    """Tests for run records on disk."""

    def test_record_excludes_credentials(self, tmp_path: Path) -> None:
        run = _run(_ok("create-database", 0), _ok("install-application", 1))

        path = save_run(tmp_path / "runs", run)

        text = path.read_text()
        assert path.name == "20250101-120000.json"
        assert "adm1n-Secret" not in text
        assert "db-Secret-1" not in text
        assert "credentials" not in json.loads(text)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_latest_run(self, tmp_path: Path) -> None:
        runs_dir = tmp_path / "runs"
        assert latest_run(runs_dir) is None

        older = _run(_ok("create-database", 0))
        newer = _run(_ok("create-database", 0))
        newer.run_id = "20250102-080000"
        save_run(runs_dir, older)
        save_run(runs_dir, newer)

        assert list_runs(runs_dir) == ["20250102-080000", "20250101-120000"]
        loaded = latest_run(runs_dir)
        assert loaded is not None
        assert loaded.run_id == "20250102-080000"
        assert loaded.results["create-database"].outcome is StepOutcome.SUCCEEDED
        assert loaded.credentials == {}

    def test_existing_record_not_overwritten(self, tmp_path: Path) -> None:
        first = _run(_ok("create-database", 0))
        path = save_run(tmp_path, first)
        original = path.read_text()

        second = _run(_ok("install-application", 0))
        with pytest.raises(FileExistsError):
            save_run(tmp_path, second)

        assert path.read_text() == original

    @pytest.mark.parametrize("outcome", list(StepOutcome))
    def test_outcomes_round_trip(self, tmp_path: Path, outcome: StepOutcome) -> None:
        run = _run(StepResult(name="a", outcome=outcome, index=0))
        save_run(tmp_path, run)
        loaded = latest_run(tmp_path)
        assert loaded is not None
        assert loaded.results["a"].outcome is outcome
