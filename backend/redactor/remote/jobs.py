"""
RemoteJobClient — submits long-running jobs and polls them to a terminal state.

Job lifecycle on the service side::

    pending → processing → complete | failed

``await_completion`` is an explicit loop: it sleeps a fixed interval
between polls while the job is pending or processing, and stops on the
first terminal or unrecognised state.  The loop can be bounded by a
per-job deadline and is cancelled cleanly with the enclosing task.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from redactor.core.constants import JOB_RESOURCES, WAITING_STATES, JobKind, JobState
from redactor.core.logging import get_logger
from redactor.pipeline.errors import (
    JobFailedError,
    JobStatusError,
    JobSubmitError,
    JobTimeoutError,
    RemoteServiceError,
    UnexpectedJobStateError,
)
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.models import JobCreated, JobStatus, ServiceModel

logger = get_logger(__name__)


@dataclass(frozen=True)
class JobHandle:
    """Identifies one submitted job."""

    kind: JobKind
    job_id: str

    @property
    def resource(self) -> str:
        return JOB_RESOURCES[self.kind]


class RemoteJobClient:
    """Submit jobs to the processing service and wait for their output."""

    def __init__(
        self,
        client: ProcessingServiceClient,
        poll_interval: float = 1.0,
        job_timeout: float | None = None,
    ) -> None:
        self._client = client
        self._poll_interval = poll_interval
        self._job_timeout = job_timeout

    async def submit(self, kind: JobKind, request: ServiceModel) -> JobHandle:
        """Create a job of the given kind.  Raises JobSubmitError."""
        resource = JOB_RESOURCES[kind]
        try:
            body = await self._client.post_json(resource, {"input": request.to_wire()})
        except RemoteServiceError as exc:
            raise JobSubmitError(
                f"{kind} job creation failed: {exc}",
                kind=kind,
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

        try:
            created = JobCreated.model_validate(body)
        except ValidationError as exc:
            raise JobSubmitError(
                f"{kind} job creation returned no job identifier",
                kind=kind,
                response_body=str(body),
            ) from exc

        handle = JobHandle(kind=kind, job_id=created.job_id)
        logger.debug("Job submitted", kind=str(kind), job_id=handle.job_id)
        return handle

    async def await_completion(
        self,
        handle: JobHandle,
        timeout: float | None = None,
    ) -> Any:
        """
        Poll ``handle`` until it completes and return its ``output`` unchanged.

        Raises:
            JobFailedError: the service reported ``failed``.
            UnexpectedJobStateError: any state outside the known enumeration.
            JobStatusError: a poll request failed.
            JobTimeoutError: the per-job deadline elapsed.
        """
        timeout = timeout if timeout is not None else self._job_timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        polls = 0

        while True:
            status = await self._poll(handle)
            polls += 1

            if status.state in WAITING_STATES:
                if deadline is not None and loop.time() + self._poll_interval > deadline:
                    raise JobTimeoutError(
                        f"{handle.kind} job {handle.job_id} still {status.state} after {timeout}s",
                        kind=handle.kind,
                        job_id=handle.job_id,
                    )
                await asyncio.sleep(self._poll_interval)
                continue

            if status.state == JobState.COMPLETE:
                logger.debug(
                    "Job complete",
                    kind=str(handle.kind),
                    job_id=handle.job_id,
                    polls=polls,
                )
                return status.output

            if status.state == JobState.FAILED:
                raise JobFailedError(
                    f"{handle.kind} job {handle.job_id} failed",
                    kind=handle.kind,
                    job_id=handle.job_id,
                    detail=status.output,
                )

            raise UnexpectedJobStateError(
                f"{handle.kind} job {handle.job_id} state unexpected: {status.state!r}",
                kind=handle.kind,
                job_id=handle.job_id,
                state=status.state,
            )

    async def run(self, kind: JobKind, request: ServiceModel) -> Any:
        """Submit a job and wait for its output."""
        handle = await self.submit(kind, request)
        return await self.await_completion(handle)

    async def _poll(self, handle: JobHandle) -> JobStatus:
        try:
            body = await self._client.get_json(f"{handle.resource}/{handle.job_id}")
        except RemoteServiceError as exc:
            raise JobStatusError(
                f"Checking status of {handle.kind} job {handle.job_id} failed: {exc}",
                kind=handle.kind,
                job_id=handle.job_id,
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

        try:
            return JobStatus.model_validate(body)
        except ValidationError as exc:
            raise UnexpectedJobStateError(
                f"{handle.kind} job {handle.job_id} returned a malformed status",
                kind=handle.kind,
                job_id=handle.job_id,
                state=None,
            ) from exc
