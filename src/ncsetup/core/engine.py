"""Execution engine for the provisioning pipeline.

Runs steps strictly in order. For each step:
1. If the step is not applicable, record it as skipped
2. Evaluate the precondition; TRUE means already satisfied, so skip
3. Otherwise run the action; record success, or record the failure and
   halt (fail-fast, no rollback) unless the step is optional

FALSE and UNKNOWN preconditions both lead to the action running: it is
safer to re-attempt an idempotent action than to wrongly skip it.
"""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from ..models import (
    Credential,
    HostTarget,
    PipelineRun,
    ProbeResult,
    Step,
    StepOutcome,
    StepResult,
)

logger = logging.getLogger(__name__)

SKIP_SATISFIED = "already satisfied"
SKIP_NOT_APPLICABLE = "not applicable"


def generate_run_id() -> str:
    """Generate run ID in format YYYYMMDD-HHMMSS-ffffff.

    Microseconds keep IDs of back-to-back runs distinct and sortable.
    """
    return datetime.now().strftime("%Y%m%d-%H%M%S-%f")


def check_unique_names(steps: Sequence[Step]) -> None:
    seen: set[str] = set()
    for step in steps:
        if step.name in seen:
            raise ValueError(f"Duplicate step name: {step.name}")
        seen.add(step.name)


def evaluate_precondition(step: Step) -> ProbeResult:
    """Evaluate a step's precondition; errors count as UNKNOWN."""
    try:
        result = step.precondition()
    except Exception as e:
        logger.warning(
            "%s: precondition check failed (%s); treating as not satisfied", step.name, e
        )
        return ProbeResult.UNKNOWN
    if isinstance(result, bool):
        result = ProbeResult.of(result)
    if result is ProbeResult.UNKNOWN:
        logger.warning("%s: host state unknown; treating as not satisfied", step.name)
    return result


def _is_applicable(step: Step) -> bool:
    if step.applies is None:
        return True
    try:
        return step.applies()
    except Exception as e:
        logger.warning("%s: applicability check failed (%s); running the step", step.name, e)
        return True


def run_pipeline(
    steps: Sequence[Step],
    *,
    host: HostTarget,
    access_url: str,
    credentials: dict[str, Credential] | None = None,
    warnings: Sequence[str] = (),
    run_id: str | None = None,
    on_step: Callable[[StepResult], None] | None = None,
) -> PipelineRun:
    """Run steps in declared order and return the recorded run.

    Args:
        steps: Ordered steps (insertion order is execution order)
        host: Target host information
        access_url: URL the application will be served at
        credentials: Secrets used by the steps, surfaced in the report
        warnings: Environment caveats collected before the run
        run_id: Explicit run ID (default: timestamp)
        on_step: Callback invoked after each recorded result

    Returns:
        PipelineRun whose results stop at the first required failure

    Raises:
        ValueError: If two steps share a name
    """
    check_unique_names(steps)
    run = PipelineRun(
        run_id=run_id or generate_run_id(),
        host=host,
        access_url=access_url,
        planned=[step.name for step in steps],
        credentials=dict(credentials or {}),
        warnings=list(warnings),
    )

    for index, step in enumerate(steps):
        started_at = datetime.now()
        start = time.monotonic()
        result = _run_step(step, index, started_at)
        result.duration_ms = int((time.monotonic() - start) * 1000)
        run.results[step.name] = result
        if on_step:
            on_step(result)
        if result.outcome is StepOutcome.FAILED:
            if step.optional:
                run.warnings.append(f"Optional step {step.name} failed: {result.reason}")
                continue
            logger.error("%s failed: %s", step.name, result.reason)
            break

    run.finished_at = datetime.now()
    return run


def _run_step(step: Step, index: int, started_at: datetime) -> StepResult:
    def record(outcome: StepOutcome, **fields: str | None) -> StepResult:
        return StepResult(
            name=step.name,
            outcome=outcome,
            index=index,
            optional=step.optional,
            started_at=started_at,
            **fields,
        )

    if not _is_applicable(step):
        logger.info("%s: skipped (%s)", step.name, SKIP_NOT_APPLICABLE)
        return record(StepOutcome.SKIPPED, detail=SKIP_NOT_APPLICABLE)

    if evaluate_precondition(step).satisfied:
        logger.info("%s: skipped (%s)", step.name, SKIP_SATISFIED)
        return record(StepOutcome.SKIPPED, detail=SKIP_SATISFIED)

    logger.info("%s: %s", step.name, step.description)
    try:
        step.action()
    except Exception as e:
        level = logging.WARNING if step.optional else logging.DEBUG
        logger.log(level, "%s raised %s", step.name, type(e).__name__, exc_info=True)
        return record(
            StepOutcome.FAILED,
            reason=str(e) or type(e).__name__,
            error_type=type(e).__name__,
        )
    return record(StepOutcome.SUCCEEDED)


def plan_pipeline(steps: Sequence[Step]) -> list[tuple[Step, ProbeResult | None]]:
    """Evaluate preconditions without running any action.

    Returns (step, precondition result) pairs; the result is None for steps
    that are not applicable. Later preconditions may depend on effects of
    earlier actions, so this is a snapshot of the current host only.
    """
    check_unique_names(steps)
    plan: list[tuple[Step, ProbeResult | None]] = []
    for step in steps:
        if not _is_applicable(step):
            plan.append((step, None))
        else:
            plan.append((step, evaluate_precondition(step)))
    return plan
