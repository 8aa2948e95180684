"""
ConversionStage — every content-converter call in the pipeline.

Merge, OCR, flatten and page extraction all send the same request shape
(``sources[]`` + ``dest``) and read the same output (``results[0].fileId``);
only the sources and destination options differ.
"""

from __future__ import annotations

from pydantic import ValidationError

from redactor.core.constants import ConversionFormat, JobKind
from redactor.core.logging import get_logger
from redactor.core.tracing import traceable_step
from redactor.pipeline.errors import ConversionResultError
from redactor.remote.content_store import ContentId
from redactor.remote.jobs import RemoteJobClient
from redactor.remote.models import (
    ConversionDest,
    ConversionOutput,
    ConversionRequest,
    OcrOptions,
    PdfOptions,
    SourceFile,
)

logger = get_logger(__name__)


class ConversionStage:
    """Content conversions run as long-running converter jobs."""

    def __init__(self, jobs: RemoteJobClient) -> None:
        self._jobs = jobs

    async def convert(self, sources: list[SourceFile], dest: ConversionDest) -> ContentId:
        """Run one conversion and return the first result's workfile id."""
        request = ConversionRequest(sources=sources, dest=dest)
        output = await self._jobs.run(JobKind.CONVERT, request)

        try:
            parsed = ConversionOutput.model_validate(output or {})
        except ValidationError as exc:
            raise ConversionResultError(
                "Conversion output is malformed",
                kind=JobKind.CONVERT,
                details={"output": output},
            ) from exc

        if not parsed.results:
            raise ConversionResultError(
                "Conversion completed without results",
                kind=JobKind.CONVERT,
                details={"output": output},
            )
        return parsed.results[0].file_id

    @traceable_step(name="merge_documents", run_type="tool")
    async def merge(self, content_ids: list[ContentId]) -> ContentId:
        """Combine several workfiles, in order, into one TIFF."""
        file_id = await self.convert(
            [SourceFile(file_id=cid) for cid in content_ids],
            ConversionDest(format=ConversionFormat.TIFF),
        )
        logger.info("Documents combined", sources=len(content_ids), file_id=file_id)
        return file_id

    @traceable_step(name="make_searchable", run_type="tool")
    async def make_searchable(self, content_id: ContentId, language: str = "english") -> ContentId:
        """OCR a workfile into a searchable PDF."""
        file_id = await self.convert(
            [SourceFile(file_id=content_id)],
            ConversionDest(
                format=ConversionFormat.PDF,
                pdf_options=PdfOptions(ocr=OcrOptions(language=language)),
            ),
        )
        logger.info("Searchable PDF created", source=content_id, file_id=file_id)
        return file_id

    @traceable_step(name="flatten_document", run_type="tool")
    async def flatten(self, content_id: ContentId) -> ContentId:
        """Rasterise a workfile to TIFF so no vector or text content survives."""
        file_id = await self.convert(
            [SourceFile(file_id=content_id)],
            ConversionDest(format=ConversionFormat.TIFF),
        )
        logger.info("Document flattened", source=content_id, file_id=file_id)
        return file_id

    async def extract_pages(
        self,
        content_id: ContentId,
        pages: str,
        fmt: ConversionFormat = ConversionFormat.PDF,
    ) -> ContentId:
        """Copy a page range (``"start-end"``, 1-based) into a new document."""
        return await self.convert(
            [SourceFile(file_id=content_id, pages=pages)],
            ConversionDest(format=fmt),
        )
