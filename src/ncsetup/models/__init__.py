"""Data models for ncsetup runs.

This package defines the data structures shared by the pipeline:
- Provisioning steps (Step) and host query results (ProbeResult)
- Per-step outcomes (StepOutcome, StepResult)
- Credentials (Credential, CredentialSource)
- The target host (HostTarget) and the run itself (PipelineRun)

Everything except Step is a Pydantic BaseModel; Step holds callables and
is a frozen dataclass.
"""

from .credential import Credential, CredentialSource
from .host import HostTarget
from .probe import ProbeResult
from .result import StepOutcome, StepResult
from .run import PipelineRun
from .step import Step

__all__ = [
    "Credential",
    "CredentialSource",
    "HostTarget",
    "PipelineRun",
    "ProbeResult",
    "Step",
    "StepOutcome",
    "StepResult",
]
