"""
PipelineEngine — drives one redaction run from input scan to outputs.

    scan_inputs → step 1 → step 2 → … → step N → PipelineResult

Steps run strictly one after another; the first failure stops the run
and is reported on the result rather than raised.  Nothing is retried
and nothing already written is rolled back.  An optional deadline
covers the whole run, cancelling whatever step is in flight.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from redactor.core.constants import PipelineStatus
from redactor.ingestion.input_scanner import output_filename, scan_inputs
from redactor.pipeline.context import PipelineContext
from redactor.pipeline.errors import (
    InputScanError,
    PipelineError,
    PipelineTimeoutError,
    StepExecutionError,
)
from redactor.pipeline.step import PipelineStep

SCAN_STEP_NAME = "scan_inputs"


@dataclass
class PipelineResult:
    """What a run produced, or where it stopped."""

    execution_id: str
    status: PipelineStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    steps_completed: int = 0
    total_steps: int = 0
    step_results: list[dict[str, Any]] = field(default_factory=list)
    context_summary: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    error_type: str | None = None
    failed_step: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == PipelineStatus.COMPLETED

    @property
    def total_duration_ms(self) -> int:
        if self.started_at is None or self.completed_at is None:
            return 0
        return int((self.completed_at - self.started_at).total_seconds() * 1000)


class PipelineEngine:
    """
    Runs a fixed list of PipelineStep objects over one input directory.

    Usage::

        engine = PipelineEngine(redaction_flow(services), run_timeout=600)
        result = await engine.run(Path("input_files"), Path("output_files"))
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        output_format: str = "pdf",
        combined_name: str = "__combined",
        run_timeout: float | None = None,
    ) -> None:
        self.steps = steps
        self.output_format = output_format
        self.combined_name = combined_name
        self.run_timeout = run_timeout
        self.logger = structlog.get_logger("pipeline.engine")

    async def run(self, input_dir: Path, output_dir: Path) -> PipelineResult:
        """Scan ``input_dir`` and run every step; never raises for a failed run."""
        ctx = PipelineContext(input_dir=input_dir, output_dir=output_dir)
        log = self.logger.bind(execution_id=ctx.execution_id)
        log.info("Pipeline started", input_dir=str(input_dir), output_dir=str(output_dir))
        started_at = _utcnow()

        try:
            ctx.input_files = scan_inputs(
                input_dir,
                output_format=self.output_format,
                reserved_names=(output_filename(self.combined_name, self.output_format),),
            )
        except InputScanError as exc:
            log.error("Input scan failed", error=str(exc))
            ctx.add_error(str(exc))
            return self._finish(ctx, started_at, 0, failure=exc, failed_name=SCAN_STEP_NAME)

        result = await self.run_steps(ctx, self.steps)
        result.started_at = started_at

        log.info(
            "Pipeline finished",
            status=result.status,
            steps_completed=result.steps_completed,
            total_steps=result.total_steps,
            duration_ms=result.total_duration_ms,
        )
        return result

    async def run_steps(
        self,
        ctx: PipelineContext,
        steps: list[PipelineStep],
    ) -> PipelineResult:
        """
        Execute ``steps`` in order against an already-populated context.

        Used by ``run`` after the scan, and directly by tests.
        """
        started_at = _utcnow()
        ctx.total_steps = len(steps)
        log = self.logger.bind(execution_id=ctx.execution_id, total_steps=len(steps))

        failure: PipelineError | None = None
        step_started_at = started_at

        try:
            async with asyncio.timeout(self.run_timeout):
                for index, step in enumerate(steps):
                    ctx.current_step_index = index
                    step_log = log.bind(step_name=step.name, step_index=index + 1)
                    step_log.info(f"Step {index + 1}/{len(steps)}: {step.description}")
                    step_started_at = _utcnow()

                    try:
                        step_result = await step.execute(ctx)
                    except PipelineError as exc:
                        failure = exc
                        break
                    except Exception as exc:
                        step_log.exception("Unexpected error in step", error=str(exc))
                        failure = StepExecutionError(f"Unexpected: {exc}")
                        failure.__cause__ = exc
                        break

                    ctx.step_results.append(step_result)
                    step_log.info(
                        "Step completed",
                        duration_ms=step_result.duration_ms,
                        metadata=step_result.metadata,
                    )
        except TimeoutError:
            failure = PipelineTimeoutError(
                f"Run exceeded its {self.run_timeout}s deadline during "
                f"'{steps[ctx.current_step_index].name}'"
            )

        if failure is None:
            return self._finish(ctx, started_at, len(steps))

        failed_step = steps[ctx.current_step_index]
        failure.execution_id = failure.execution_id or ctx.execution_id
        failure.step_name = failure.step_name or failed_step.name
        ctx.step_results.append(failed_step._failure(step_started_at, failure))
        ctx.add_error(f"Step '{failed_step.name}' failed: {failure}")
        log.error(
            "Step failed, pipeline stopping",
            step_name=failed_step.name,
            error=str(failure),
            error_type=type(failure).__name__,
        )
        return self._finish(
            ctx,
            started_at,
            ctx.current_step_index,
            failure=failure,
            failed_name=failed_step.name,
        )

    def _finish(
        self,
        ctx: PipelineContext,
        started_at: datetime,
        steps_completed: int,
        failure: Exception | None = None,
        failed_name: str | None = None,
    ) -> PipelineResult:
        return PipelineResult(
            execution_id=ctx.execution_id,
            status=PipelineStatus.FAILED if failure else PipelineStatus.COMPLETED,
            started_at=started_at,
            completed_at=_utcnow(),
            steps_completed=steps_completed,
            total_steps=len(self.steps) if failed_name == SCAN_STEP_NAME else ctx.total_steps,
            step_results=[sr.to_dict() for sr in ctx.step_results],
            context_summary=ctx.to_summary_dict(),
            error=str(failure) if failure else None,
            error_type=type(failure).__name__ if failure else None,
            failed_step=failed_name,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
