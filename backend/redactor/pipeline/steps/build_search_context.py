"""BuildSearchContextStep — indexes the searchable document for PII search."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.search_context import SearchContextStage


class BuildSearchContextStep(PipelineStep):
    name = "build_search_context"
    description = "Create a search context over the searchable document"

    def __init__(self, search_context: SearchContextStage) -> None:
        self._search_context = search_context

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        ctx.search_context_id = await self._search_context.create(ctx.require("searchable_id"))
        return self._success(started_at, metadata={"search_context_id": ctx.search_context_id})
