"""DetectPiiStep — finds PII entities in the indexed document."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.pii_detection import PiiDetectionStage


class DetectPiiStep(PipelineStep):
    name = "detect_pii"
    description = "Search the document for PII"

    def __init__(self, pii_detection: PiiDetectionStage) -> None:
        self._pii_detection = pii_detection

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        ctx.entities = await self._pii_detection.detect(ctx.require("search_context_id"))
        return self._success(started_at, metadata={"entity_count": len(ctx.entities)})
