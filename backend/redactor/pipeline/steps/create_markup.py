"""CreateMarkupStep — builds and uploads the redaction markup layer."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.markup import MarkupStage


class CreateMarkupStep(PipelineStep):
    name = "create_markup"
    description = "Create a markup layer from the PII entities"

    def __init__(self, markup: MarkupStage) -> None:
        self._markup = markup

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        ctx.markup_id = await self._markup.create(ctx.entities)
        return self._success(started_at, metadata={"markup_id": ctx.markup_id})
