"""Core provisioning logic for ncsetup.

- engine: ordered, fail-fast step execution
- registry: the step catalog for the LAMP groupware profile
- preflight: fatal host checks and environment warnings
- php_ini: php.ini directive rewriting
- report: run summaries
- run_store: run records on disk
- toolbox: collaborator bundle injected into steps
"""

from .engine import plan_pipeline, run_pipeline
from .preflight import run_preflight
from .registry import ORDERING_CONSTRAINTS, access_url, build_steps, check_ordering
from .report import render_report, report_data
from .run_store import latest_run, list_runs, load_run, save_run
from .toolbox import Toolbox

__all__ = [
    "ORDERING_CONSTRAINTS",
    "Toolbox",
    "access_url",
    "build_steps",
    "check_ordering",
    "latest_run",
    "list_runs",
    "load_run",
    "plan_pipeline",
    "render_report",
    "report_data",
    "run_pipeline",
    "run_preflight",
    "save_run",
]
