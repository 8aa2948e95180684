"""
PipelineStep — base class for the redaction flow's steps.

A step moves the run one link along the workfile chain: it reads the id
an earlier step left on the context, calls one stage adapter, and writes
the resulting id back.  The engine owns timing, logging and failure
handling, so a step either returns a StepResult or raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from redactor.core.constants import StepStatus
from redactor.pipeline.context import PipelineContext, StepResult


class PipelineStep(ABC):
    """
    One stage of a redaction run.

    Subclasses set ``name`` (used in logs and in PipelineResult.failed_step)
    and ``description``, and implement ``execute``.  Nothing is retried or
    rolled back: an exception from ``execute`` ends the run.
    """

    name: str = "unnamed_step"
    description: str = "No description"

    @abstractmethod
    async def execute(self, ctx: PipelineContext) -> StepResult:
        """Do the work and return ``self._success(...)``; raise a PipelineError on failure."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    # ─── Result builders ───────────────────────────────

    def _success(
        self,
        started_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> StepResult:
        return self._result(StepStatus.COMPLETED, started_at, metadata=metadata)

    def _failure(
        self,
        started_at: datetime,
        error: BaseException,
        metadata: dict[str, Any] | None = None,
    ) -> StepResult:
        """Failed StepResult; the engine builds this, steps raise instead."""
        return self._result(
            StepStatus.FAILED,
            started_at,
            metadata=metadata,
            error=str(error),
            error_type=type(error).__name__,
        )

    def _result(
        self,
        status: StepStatus,
        started_at: datetime,
        metadata: dict[str, Any] | None = None,
        **error_fields: str,
    ) -> StepResult:
        completed_at = self._now()
        return StepResult(
            step_name=self.name,
            status=status,
            started_at=started_at,
            completed_at=completed_at,
            duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            metadata=metadata or {},
            **error_fields,
        )

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
