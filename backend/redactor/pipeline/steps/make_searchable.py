"""
MakeSearchableStep — OCRs a workfile into a searchable PDF.

Used twice in the flow: once on the merged document before PII search,
and once on the flattened document to produce the final output.  Each
instance is told which context field to read and which to write.
"""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.conversion import ConversionStage


class MakeSearchableStep(PipelineStep):
    description = "Convert document to a searchable PDF with OCR"

    def __init__(
        self,
        conversion: ConversionStage,
        source_attr: str,
        target_attr: str,
        language: str = "english",
        step_name: str = "make_searchable",
    ) -> None:
        self.name = step_name
        self._conversion = conversion
        self._source_attr = source_attr
        self._target_attr = target_attr
        self._language = language

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        source_id = ctx.require(self._source_attr)
        file_id = await self._conversion.make_searchable(source_id, self._language)
        setattr(ctx, self._target_attr, file_id)

        return self._success(started_at, metadata={
            "source_id": source_id,
            self._target_attr: file_id,
        })
