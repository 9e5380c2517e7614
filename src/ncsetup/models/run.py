"""Pipeline run model.

A PipelineRun is produced by the execution engine and owns the per-step
results and the credentials for the duration of the run.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .credential import Credential
from .host import HostTarget
from .result import StepOutcome, StepResult


class PipelineRun(BaseModel):
    """One end-to-end execution of the provisioning pipeline.

    Attributes:
        run_id: Unique identifier (format: YYYYMMDD-HHMMSS).
        host: Target host information.
        access_url: URL the application is reachable at.
        planned: Step names in execution order.
        results: Results keyed by step name, in execution order. Steps after
            a fatal failure have no entry.
        credentials: Secrets keyed by label. Excluded from run records.
        warnings: Environment caveats collected before and during the run.
    """

    run_id: str
    host: HostTarget
    access_url: str
    planned: list[str] = Field(default_factory=list)
    results: dict[str, StepResult] = Field(default_factory=dict)
    credentials: dict[str, Credential] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def failed_step(self) -> StepResult | None:
        """First failed required step, or None."""
        for result in self.results.values():
            if result.outcome is StepOutcome.FAILED and not result.optional:
                return result
        return None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and len(self.results) == len(self.planned)

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def count(self, outcome: StepOutcome) -> int:
        return sum(1 for r in self.results.values() if r.outcome is outcome)

    def applied(self, step_name: str) -> bool:
        """True if the named step executed successfully in this run."""
        result = self.results.get(step_name)
        return result is not None and result.outcome is StepOutcome.SUCCEEDED

    def to_record(self) -> str:
        """Serialize for the run store, without credentials."""
        return self.model_dump_json(indent=2, exclude={"credentials"})
