"""
UploadInputsStep — uploads EVERY input file and discovers its page count.

Per input, concurrently:
    1. Read the file
    2. Upload it as a workfile
    3. Build a search context over it and count its pages

Results are placed by input index, so ctx.inputs keeps the scan order no
matter which upload finishes first.  Any single failure aborts the step
and cancels the uploads still in flight.
"""

from __future__ import annotations

import asyncio

from redactor.core.logging import get_logger
from redactor.ingestion.input_scanner import InputFile
from redactor.pipeline.context import InputDocument, PipelineContext, StepResult
from redactor.pipeline.errors import StepExecutionError
from redactor.pipeline.step import PipelineStep
from redactor.processing.concurrency import gather_ordered
from redactor.processing.search_context import SearchContextStage
from redactor.remote.content_store import ContentStore

logger = get_logger(__name__)


class UploadInputsStep(PipelineStep):
    """Upload all inputs in parallel and record their page counts."""

    name = "upload_inputs"
    description = "Upload input files and discover page counts"

    def __init__(
        self,
        store: ContentStore,
        search_context: SearchContextStage,
        max_concurrency: int | None = None,
    ) -> None:
        self._store = store
        self._search_context = search_context
        self._max_concurrency = max_concurrency

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        if not ctx.input_files:
            raise StepExecutionError(
                "No input files to upload",
                execution_id=ctx.execution_id,
                step_name=self.name,
            )

        ctx.inputs = await gather_ordered(
            [self._upload_one(f, ctx) for f in ctx.input_files],
            limit=self._max_concurrency,
        )

        logger.info(
            "All inputs uploaded",
            inputs=[doc.to_dict() for doc in ctx.inputs],
            total_pages=ctx.total_pages,
        )
        return self._success(started_at, metadata={
            "files": len(ctx.inputs),
            "total_pages": ctx.total_pages,
        })

    async def _upload_one(self, input_file: InputFile, ctx: PipelineContext) -> InputDocument:
        content = await asyncio.to_thread(input_file.read)
        content_id = await self._store.upload(
            content,
            input_file.content_type,
            input_file.extension,
        )
        context_id, page_count = await self._search_context.discover(content_id)

        if page_count < 1:
            raise StepExecutionError(
                f"{input_file.filename} has no pages",
                execution_id=ctx.execution_id,
                step_name=self.name,
                details={"file_id": content_id, "context_id": context_id},
            )

        logger.info(
            "Input uploaded",
            filename=input_file.filename,
            file_id=content_id,
            pages=page_count,
        )
        return InputDocument(
            index=input_file.index,
            filename=input_file.filename,
            extension=input_file.extension,
            content_id=content_id,
            page_count=page_count,
            source_path=input_file.path,
        )
