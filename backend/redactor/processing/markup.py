"""
MarkupStage — turns detected PII entities into a redaction markup layer.

Purely local apart from the final upload: each line rectangle of an
entity's first line group becomes one opaque black rectangle annotation
on page ``page_index + 1``.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

from redactor.core.constants import DEFAULT_CONTENT_TYPE
from redactor.core.logging import get_logger
from redactor.remote.content_store import ContentId, ContentStore
from redactor.remote.models import MarkupLayer, MarkupMark, PiiEntity

logger = get_logger(__name__)

MARKUP_EXTENSION = "json"


def _timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_marks(entities: list[PiiEntity], now: datetime | None = None) -> list[MarkupMark]:
    """Expand entities into marks, in entity order then line order."""
    stamp = _timestamp(now or datetime.now(timezone.utc))
    marks: list[MarkupMark] = []
    for entity in entities:
        if not entity.line_groups:
            continue
        group = entity.line_groups[0]
        for rect in group.lines:
            marks.append(MarkupMark(
                uid=str(uuid.uuid4()),
                page_number=entity.page_index + 1,
                rectangle=rect,
                page_data=group.page_data,
                creation_date_time=stamp,
                modification_date_time=stamp,
            ))
    return marks


class MarkupStage:
    """Builds the markup layer and stores it as a workfile."""

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def build_layer(self, entities: list[PiiEntity], now: datetime | None = None) -> MarkupLayer:
        return MarkupLayer(marks=build_marks(entities, now))

    async def create(self, entities: list[PiiEntity]) -> ContentId:
        """Upload the markup layer for ``entities`` and return its workfile id."""
        layer = self.build_layer(entities)
        body = json.dumps(layer.to_wire(), indent=2).encode("utf-8")
        file_id = await self._store.upload(body, DEFAULT_CONTENT_TYPE, MARKUP_EXTENSION)
        logger.info("Markup layer uploaded", marks=len(layer.marks), file_id=file_id)
        return file_id
