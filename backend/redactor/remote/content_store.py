"""ContentStore — workfile upload and download."""

from __future__ import annotations

from pydantic import ValidationError

from redactor.core.constants import WORKFILE_RESOURCE
from redactor.core.logging import get_logger
from redactor.pipeline.errors import FetchError, RemoteServiceError, UploadError
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.models import UploadResponse

logger = get_logger(__name__)

ContentId = str


class ContentStore:
    """
    Stores binary content on the processing service as workfiles.

    Content is write-once: every upload yields a new identifier.  Nothing
    is cached locally, so every fetch goes back to the service.
    """

    def __init__(self, client: ProcessingServiceClient) -> None:
        self._client = client

    async def upload(self, content: bytes, content_type: str, extension: str) -> ContentId:
        """Create a workfile from ``content``.  One request, never retried."""
        try:
            body = await self._client.post_bytes(
                WORKFILE_RESOURCE,
                content,
                content_type,
                params={"FileExtension": extension},
            )
        except RemoteServiceError as exc:
            raise UploadError(
                f"Workfile creation failed: {exc}",
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

        try:
            file_id = UploadResponse.model_validate(body).file_id
        except ValidationError as exc:
            raise UploadError(
                "Workfile creation returned no fileId",
                response_body=str(body),
            ) from exc

        logger.debug(
            "Workfile uploaded",
            file_id=file_id,
            extension=extension,
            size_bytes=len(content),
        )
        return file_id

    async def fetch(self, content_id: ContentId) -> bytes:
        """Read the bytes of a workfile."""
        try:
            return await self._client.get_bytes(f"{WORKFILE_RESOURCE}/{content_id}")
        except RemoteServiceError as exc:
            raise FetchError(
                f"Retrieving workfile {content_id} failed: {exc}",
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc
