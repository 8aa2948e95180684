"""WriteCombinedOutputStep — saves the whole redacted document under the reserved name."""

from __future__ import annotations

import asyncio

from redactor.ingestion.input_scanner import output_filename
from redactor.pipeline.context import PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep
from redactor.processing.split import write_output
from redactor.remote.content_store import ContentStore


class WriteCombinedOutputStep(PipelineStep):
    name = "write_combined_output"
    description = "Download the combined redacted document"

    def __init__(
        self,
        store: ContentStore,
        combined_name: str = "__combined",
        output_format: str = "pdf",
    ) -> None:
        self._store = store
        self._filename = output_filename(combined_name, output_format)

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        content = await self._store.fetch(ctx.require("final_id"))
        ctx.combined_output = await asyncio.to_thread(
            write_output, ctx.output_dir / self._filename, content,
        )
        return self._success(started_at, metadata={
            "combined_output": str(ctx.combined_output),
            "size_bytes": len(content),
        })
