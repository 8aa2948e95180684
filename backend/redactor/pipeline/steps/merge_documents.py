"""MergeDocumentsStep — combines every uploaded input, in order, into one TIFF."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.errors import StepExecutionError
from redactor.pipeline.step import PipelineStep
from redactor.processing.conversion import ConversionStage


class MergeDocumentsStep(PipelineStep):
    name = "merge_documents"
    description = "Combine all inputs into a single document"

    def __init__(self, conversion: ConversionStage) -> None:
        self._conversion = conversion

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        if not ctx.inputs:
            raise StepExecutionError(
                "No uploaded inputs to merge",
                execution_id=ctx.execution_id,
                step_name=self.name,
            )

        ctx.combined_id = await self._conversion.merge([doc.content_id for doc in ctx.inputs])
        return self._success(started_at, metadata={
            "sources": len(ctx.inputs),
            "combined_id": ctx.combined_id,
        })
