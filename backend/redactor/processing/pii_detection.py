"""PiiDetectionStage — runs a PII detector over a search context."""

from __future__ import annotations

from pydantic import ValidationError

from redactor.core.constants import PII_DETECTORS_RESOURCE, JobKind
from redactor.core.logging import get_logger
from redactor.core.tracing import traceable_step
from redactor.pipeline.errors import FetchError, RemoteServiceError
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.jobs import RemoteJobClient
from redactor.remote.models import PiiDetectorRequest, PiiEntitiesResponse, PiiEntity

logger = get_logger(__name__)


class PiiDetectionStage:
    """Detect PII entities.  The job's completion does not carry them; a second read does."""

    def __init__(self, jobs: RemoteJobClient, client: ProcessingServiceClient) -> None:
        self._jobs = jobs
        self._client = client

    @traceable_step(name="detect_pii", run_type="tool")
    async def detect(self, context_id: str) -> list[PiiEntity]:
        handle = await self._jobs.submit(
            JobKind.PII_DETECT,
            PiiDetectorRequest(context_id=context_id),
        )
        await self._jobs.await_completion(handle)

        try:
            body = await self._client.get_json(
                f"{PII_DETECTORS_RESOURCE}/{handle.job_id}/entities"
            )
        except RemoteServiceError as exc:
            raise FetchError(
                f"PII detection results for {handle.job_id} could not be read: {exc}",
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

        try:
            entities = PiiEntitiesResponse.model_validate(body).entities
        except ValidationError as exc:
            raise FetchError(
                f"PII detector {handle.job_id} returned malformed entities",
                response_body=str(body),
            ) from exc

        logger.info("PII detection complete", context_id=context_id, entities=len(entities))
        return entities
