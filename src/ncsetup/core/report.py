"""Result Reporter: human-readable and JSON summaries of a pipeline run."""

from typing import Any

from ..models import Credential, PipelineRun, StepOutcome

ROTATE_NOTICE = "Change the administrator password after the first login."
STORE_NOTICE = "Store these credentials in a safe place."

_MARKERS = {
    StepOutcome.SUCCEEDED: "[ok]  ",
    StepOutcome.SKIPPED: "[skip]",
    StepOutcome.FAILED: "[FAIL]",
}

_LABELS = {
    "admin": "Administrator",
    "database": "Database user",
    "database-root": "Database root",
}


def _credential_line(run: PipelineRun, credential: Credential) -> str:
    label = _LABELS.get(credential.label, credential.label)
    if not run.applied(credential.applied_by):
        return f"  {label} ({credential.username}): unchanged (set by a previous run)"
    line = f"  {label} ({credential.username}): {credential.secret}"
    if credential.insecure:
        line += "  [INSECURE DEFAULT]"
    return line


def render_report(run: PipelineRun) -> str:
    """Return the final summary printed to the operator.

    Lists each step's outcome in execution order, planned steps that never
    ran, warnings, the access URL, and every credential applied in this run.
    """
    lines = [f"Run {run.run_id} on {run.host.hostname} ({run.host.address})", ""]
    for result in run.results.values():
        line = f"  {_MARKERS[result.outcome]} {result.name}"
        if result.outcome is StepOutcome.SKIPPED and result.detail:
            line += f" ({result.detail})"
        elif result.outcome is StepOutcome.FAILED:
            suffix = " (optional)" if result.optional else ""
            line += f"{suffix}: {result.reason}"
        lines.append(line)
    for name in run.planned:
        if name not in run.results:
            lines.append(f"  [--]   {name} (not run)")

    if run.warnings:
        lines += ["", "Warnings:"]
        lines += [f"  - {warning}" for warning in run.warnings]

    lines.append("")
    failed = run.failed_step
    if failed is not None:
        lines.append(f"FAILED at step {failed.name}: {failed.reason}")
    else:
        lines.append("Installation completed successfully.")
        lines.append(f"URL: {run.access_url}")

    if run.credentials:
        lines += ["", "Credentials:"]
        lines += [_credential_line(run, c) for c in run.credentials.values()]
        if any(c.insecure for c in run.credentials.values()):
            lines.append("  Credentials marked INSECURE DEFAULT are weak; replace them now.")
        lines += ["", STORE_NOTICE, ROTATE_NOTICE]
    return "\n".join(lines)


def report_data(run: PipelineRun) -> dict[str, Any]:
    """Machine-readable summary for --json output."""
    failed = run.failed_step
    credentials = {}
    for label, credential in run.credentials.items():
        applied = run.applied(credential.applied_by)
        credentials[label] = {
            "username": credential.username,
            "secret": credential.secret if applied else None,
            "applied": applied,
            "source": credential.source.value,
            "insecure": credential.insecure,
        }
    return {
        "run_id": run.run_id,
        "success": run.succeeded,
        "failed_step": failed.name if failed else None,
        "reason": failed.reason if failed else None,
        "access_url": run.access_url,
        "steps": [
            {
                "name": r.name,
                "outcome": r.outcome.value,
                "detail": r.detail,
                "reason": r.reason,
            }
            for r in run.results.values()
        ],
        "not_run": [name for name in run.planned if name not in run.results],
        "warnings": list(run.warnings),
        "credentials": credentials,
    }
