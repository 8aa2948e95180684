"""BurnMarkupStep — burns the markup layer onto the searchable document."""

from __future__ import annotations

from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.burn import BurnStage


class BurnMarkupStep(PipelineStep):
    name = "burn_markup"
    description = "Burn redaction marks onto the document"

    def __init__(self, burn: BurnStage) -> None:
        self._burn = burn

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        # Marks were computed against the searchable PDF's page geometry
        ctx.burned_id = await self._burn.burn(
            ctx.require("searchable_id"),
            ctx.require("markup_id"),
        )
        return self._success(started_at, metadata={"burned_id": ctx.burned_id})
