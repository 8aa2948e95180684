"""
SplitStage — cuts the final combined document back into one file per input.

Page ranges are computed sequentially over the fixed input order: input
``i`` starts on the page after input ``i-1`` ends.  Once computed, the
ranges are independent, so extraction, download and local write run
concurrently and each result lands in its input's slot.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from redactor.core.constants import ConversionFormat
from redactor.core.logging import get_logger
from redactor.ingestion.input_scanner import output_filename
from redactor.pipeline.context import InputDocument
from redactor.pipeline.errors import LocalIOError
from redactor.processing.concurrency import gather_ordered
from redactor.processing.conversion import ConversionStage
from redactor.remote.content_store import ContentId, ContentStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageRange:
    """Inclusive, 1-based page range."""

    start: int
    end: int

    @property
    def page_count(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def compute_ranges(page_counts: list[int]) -> list[PageRange]:
    """
    Consecutive ranges covering ``sum(page_counts)`` pages with no gaps or overlaps.

    >>> [str(r) for r in compute_ranges([3, 2])]
    ['1-3', '4-5']
    """
    ranges: list[PageRange] = []
    start = 1
    for index, count in enumerate(page_counts):
        if count < 1:
            raise ValueError(f"Input {index} has {count} pages; every input needs at least one")
        ranges.append(PageRange(start=start, end=start + count - 1))
        start += count
    return ranges


def write_output(path: Path, content: bytes) -> Path:
    """Write ``content`` to ``path``, replacing any previous file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    except OSError as exc:
        raise LocalIOError(f"Could not write {path}: {exc}") from exc
    logger.info("Output file written", output_file=str(path), size_bytes=len(content))
    return path


class SplitStage:
    """Page-range extraction per input, run concurrently."""

    def __init__(
        self,
        conversion: ConversionStage,
        store: ContentStore,
        output_format: ConversionFormat = ConversionFormat.PDF,
        max_concurrency: int | None = None,
    ) -> None:
        self._conversion = conversion
        self._store = store
        self._format = output_format
        self._max_concurrency = max_concurrency

    async def split(
        self,
        document_id: ContentId,
        inputs: list[InputDocument],
        output_dir: Path,
    ) -> list[Path]:
        """Write one output per input; returned paths are in input order."""
        ranges = compute_ranges([doc.page_count for doc in inputs])
        logger.info(
            "Splitting combined document",
            document=document_id,
            ranges={doc.filename: str(rng) for doc, rng in zip(inputs, ranges)},
        )
        return await gather_ordered(
            [
                self._extract_one(document_id, doc, rng, output_dir)
                for doc, rng in zip(inputs, ranges)
            ],
            limit=self._max_concurrency,
        )

    async def _extract_one(
        self,
        document_id: ContentId,
        doc: InputDocument,
        pages: PageRange,
        output_dir: Path,
    ) -> Path:
        file_id = await self._conversion.extract_pages(document_id, str(pages), self._format)
        content = await self._store.fetch(file_id)
        path = output_dir / output_filename(doc.filename, self._format)
        return await asyncio.to_thread(write_output, path, content)
