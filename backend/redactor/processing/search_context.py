"""
SearchContextStage — builds search contexts and reads their page count.

Creating a context does not report how many pages it indexed, so the
page count comes from a second read of the context's page records.
"""

from __future__ import annotations

import uuid

from pydantic import ValidationError

from redactor.core.constants import SEARCH_CONTEXTS_RESOURCE, JobKind
from redactor.core.logging import get_logger
from redactor.pipeline.errors import FetchError, RemoteServiceError
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.content_store import ContentId
from redactor.remote.jobs import RemoteJobClient
from redactor.remote.models import SearchContextRecords, SearchContextRequest

logger = get_logger(__name__)


class SearchContextStage:
    """Search context creation and page metadata lookup."""

    def __init__(self, jobs: RemoteJobClient, client: ProcessingServiceClient) -> None:
        self._jobs = jobs
        self._client = client

    async def create(self, content_id: ContentId) -> str:
        """Index a workfile and return the search context id once it is ready."""
        request = SearchContextRequest(
            document_identifier=str(uuid.uuid4()),
            file_id=content_id,
        )
        handle = await self._jobs.submit(JobKind.SEARCH_CONTEXT_BUILD, request)
        await self._jobs.await_completion(handle)
        logger.debug("Search context ready", file_id=content_id, context_id=handle.job_id)
        return handle.job_id

    async def page_count(self, context_id: str) -> int:
        """Number of pages recorded in a search context."""
        try:
            body = await self._client.get_json(
                f"{SEARCH_CONTEXTS_RESOURCE}/{context_id}/records",
                params={"pages": "0-"},
            )
        except RemoteServiceError as exc:
            raise FetchError(
                f"Retrieving info from search context {context_id} failed: {exc}",
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

        try:
            records = SearchContextRecords.model_validate(body)
        except ValidationError as exc:
            raise FetchError(
                f"Search context {context_id} returned malformed page records",
                response_body=str(body),
            ) from exc
        return len(records.pages)

    async def discover(self, content_id: ContentId) -> tuple[str, int]:
        """Create a context for ``content_id`` and return ``(context_id, page_count)``."""
        context_id = await self.create(content_id)
        return context_id, await self.page_count(context_id)
