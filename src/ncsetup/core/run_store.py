"""Run records written under <state_dir>/runs/.

Records are the PipelineRun without credentials, so they are safe to keep
and let ``ncsetup status`` show what the last run did.
"""

import os
from pathlib import Path

from ..models import PipelineRun

RECORD_MODE = 0o600


def save_run(runs_dir: Path, run: PipelineRun) -> Path:
    """Write a run record and return its path.

    Raises:
        FileExistsError: If a record with the same run ID already exists
    """
    runs_dir.mkdir(parents=True, exist_ok=True)
    path = runs_dir / f"{run.run_id}.json"
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, RECORD_MODE)
    with os.fdopen(fd, "w") as f:
        f.write(run.to_record())
    os.chmod(path, RECORD_MODE)
    return path


def list_runs(runs_dir: Path) -> list[str]:
    """Return run IDs, newest first."""
    if not runs_dir.exists():
        return []
    return sorted((p.stem for p in runs_dir.glob("*.json")), reverse=True)


def load_run(runs_dir: Path, run_id: str) -> PipelineRun:
    return PipelineRun.model_validate_json((runs_dir / f"{run_id}.json").read_text())


def latest_run(runs_dir: Path) -> PipelineRun | None:
    runs = list_runs(runs_dir)
    return load_run(runs_dir, runs[0]) if runs else None
