"""FlattenDocumentStep — rasterises the burned document to secure the redactions."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.conversion import ConversionStage


class FlattenDocumentStep(PipelineStep):
    name = "flatten_document"
    description = "Flatten the redacted document"

    def __init__(self, conversion: ConversionStage) -> None:
        self._conversion = conversion

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        ctx.flattened_id = await self._conversion.flatten(ctx.require("burned_id"))
        return self._success(started_at, metadata={"flattened_id": ctx.flattened_id})
