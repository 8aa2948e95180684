"""SplitDocumentStep — writes one redacted file per input."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.split import SplitStage


class SplitDocumentStep(PipelineStep):
    name = "split_document"
    description = "Split the redacted document back into the original files"

    def __init__(self, split: SplitStage) -> None:
        self._split = split

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        ctx.output_files = await self._split.split(
            ctx.require("final_id"),
            ctx.inputs,
            ctx.output_dir,
        )
        return self._success(started_at, metadata={
            "output_files": [str(p) for p in ctx.output_files],
        })
