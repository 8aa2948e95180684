"""BurnStage — composites a markup layer onto a document."""

from __future__ import annotations

from pydantic import ValidationError

from redactor.core.constants import JobKind
from redactor.core.logging import get_logger
from redactor.core.tracing import traceable_step
from redactor.pipeline.errors import ConversionResultError
from redactor.remote.content_store import ContentId
from redactor.remote.jobs import RemoteJobClient
from redactor.remote.models import MarkupBurnOutput, MarkupBurnRequest

logger = get_logger(__name__)


class BurnStage:
    def __init__(self, jobs: RemoteJobClient) -> None:
        self._jobs = jobs

    @traceable_step(name="burn_markup", run_type="tool")
    async def burn(self, document_id: ContentId, markup_id: ContentId) -> ContentId:
        output = await self._jobs.run(
            JobKind.MARKUP_BURN,
            MarkupBurnRequest(document_file_id=document_id, markup_file_id=markup_id),
        )
        try:
            burned_id = MarkupBurnOutput.model_validate(output or {}).document_file_id
        except ValidationError as exc:
            raise ConversionResultError(
                "Markup burner completed without a documentFileId",
                kind=JobKind.MARKUP_BURN,
                details={"output": output},
            ) from exc

        logger.info("Markup burned", document=document_id, markup=markup_id, file_id=burned_id)
        return burned_id
