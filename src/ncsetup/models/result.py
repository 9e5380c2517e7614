"""Per-step outcome models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class StepOutcome(str, Enum):
    """Outcome of evaluating one step."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class StepResult(BaseModel):
    """Recorded result for a single step of a pipeline run."""

    name: str = Field(description="Step name")
    outcome: StepOutcome = Field(description="skipped, succeeded or failed")
    index: int = Field(description="0-based execution order")
    detail: str | None = Field(default=None, description="Why the step was skipped")
    reason: str | None = Field(default=None, description="Failure message")
    error_type: str | None = Field(default=None, description="Exception class on failure")
    optional: bool = Field(default=False, description="True if failure is non-fatal")
    started_at: datetime = Field(default_factory=datetime.now)
    duration_ms: int = Field(default=0, description="Wall time spent on the step")
