import asyncio
import json

import httpx
import pytest

from redactor.core.constants import JobKind
from redactor.pipeline.errors import (
    JobFailedError,
    JobStatusError,
    JobSubmitError,
    JobTimeoutError,
    UnexpectedJobStateError,
)
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.jobs import JobHandle, RemoteJobClient
from redactor.remote.models import ConversionDest, ConversionRequest, SourceFile


class ScriptedService:
    """Answers polls from a fixed list of status bodies, repeating the last one."""

    def __init__(self, statuses: list[dict], submit_body: dict | None = None) -> None:
        self.statuses = statuses
        self.submit_body = submit_body if submit_body is not None else {"processId": "p-1"}
        self.polls = 0
        self.submitted: list[dict] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.submitted.append(json.loads(request.content))
            return httpx.Response(200, json=self.submit_body)
        body = self.statuses[min(self.polls, len(self.statuses) - 1)]
        self.polls += 1
        return httpx.Response(200, json=body)


def _make_jobs(service: ScriptedService, **kwargs) -> RemoteJobClient:
    client = ProcessingServiceClient("http://pd.test", transport=httpx.MockTransport(service.handle))
    return RemoteJobClient(client, poll_interval=0.001, **kwargs)


def _request() -> ConversionRequest:
    return ConversionRequest(sources=[SourceFile(file_id="wf-1")], dest=ConversionDest(format="pdf"))


HANDLE = JobHandle(kind=JobKind.CONVERT, job_id="p-1")


class TestSubmit:
    @pytest.mark.asyncio
    async def test_wraps_request_in_input(self) -> None:
        service = ScriptedService([])
        jobs = _make_jobs(service)

        handle = await jobs.submit(JobKind.CONVERT, _request())

        assert handle == HANDLE
        assert service.submitted == [{
            "input": {"sources": [{"fileId": "wf-1"}], "dest": {"format": "pdf"}},
        }]

    @pytest.mark.asyncio
    async def test_accepts_context_id(self) -> None:
        jobs = _make_jobs(ScriptedService([], submit_body={"contextId": "ctx-9"}))

        handle = await jobs.submit(JobKind.SEARCH_CONTEXT_BUILD, _request())

        assert handle.job_id == "ctx-9"
        assert handle.resource == "v2/searchContexts"

    @pytest.mark.asyncio
    async def test_missing_identifier_raises(self) -> None:
        jobs = _make_jobs(ScriptedService([], submit_body={"unexpected": True}))

        with pytest.raises(JobSubmitError):
            await jobs.submit(JobKind.CONVERT, _request())

    @pytest.mark.asyncio
    async def test_error_response_raises(self) -> None:
        client = ProcessingServiceClient(
            "http://pd.test",
            transport=httpx.MockTransport(lambda _: httpx.Response(400, json={"errorCode": "Bad"})),
        )
        jobs = RemoteJobClient(client, poll_interval=0.001)

        with pytest.raises(JobSubmitError) as exc_info:
            await jobs.submit(JobKind.PII_DETECT, _request())

        assert exc_info.value.status_code == 400
        assert exc_info.value.kind == JobKind.PII_DETECT


class TestAwaitCompletion:
    @pytest.mark.asyncio
    async def test_returns_output_unchanged(self) -> None:
        output = {"results": [{"fileId": "wf-2", "pageCount": 3}], "extra": [1, 2]}
        jobs = _make_jobs(ScriptedService([{"state": "complete", "output": output}]))

        assert await jobs.await_completion(HANDLE) == output

    @pytest.mark.asyncio
    async def test_returns_none_when_output_absent(self) -> None:
        jobs = _make_jobs(ScriptedService([{"state": "complete"}]))

        assert await jobs.await_completion(HANDLE) is None

    @pytest.mark.asyncio
    async def test_polls_through_pending_and_processing(self) -> None:
        service = ScriptedService([
            {"state": "pending"},
            {"state": "processing"},
            {"state": "processing"},
            {"state": "complete", "output": {"ok": True}},
        ])
        jobs = _make_jobs(service)

        assert await jobs.await_completion(HANDLE) == {"ok": True}
        assert service.polls == 4

    @pytest.mark.asyncio
    async def test_failed_raises_job_failed(self) -> None:
        service = ScriptedService([
            {"state": "processing"},
            {"state": "failed", "output": {"errorCode": "Boom"}},
        ])
        jobs = _make_jobs(service)

        with pytest.raises(JobFailedError) as exc_info:
            await jobs.await_completion(HANDLE)

        assert exc_info.value.kind == JobKind.CONVERT
        assert exc_info.value.detail == {"errorCode": "Boom"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", ["cancelled", "COMPLETE", "", None])
    async def test_unknown_state_raises_without_polling_again(self, state) -> None:
        service = ScriptedService([{"state": state}, {"state": "complete"}])
        jobs = _make_jobs(service)

        with pytest.raises(UnexpectedJobStateError) as exc_info:
            await jobs.await_completion(HANDLE)

        assert service.polls == 1
        assert exc_info.value.state == state
        assert "convert" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_poll_error_is_fatal(self) -> None:
        calls = {"count": 0}

        def handler(_: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            return httpx.Response(503, json={"errorCode": "Unavailable"})

        client = ProcessingServiceClient("http://pd.test", transport=httpx.MockTransport(handler))
        jobs = RemoteJobClient(client, poll_interval=0.001)

        with pytest.raises(JobStatusError) as exc_info:
            await jobs.await_completion(HANDLE)

        assert calls["count"] == 1
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_job_timeout(self) -> None:
        jobs = _make_jobs(ScriptedService([{"state": "processing"}]), job_timeout=0.01)

        with pytest.raises(JobTimeoutError):
            await jobs.await_completion(HANDLE)

    @pytest.mark.asyncio
    async def test_cancellation_stops_polling(self) -> None:
        service = ScriptedService([{"state": "processing"}])
        jobs = _make_jobs(service)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(jobs.await_completion(HANDLE), timeout=0.05)

        polls_at_cancel = service.polls
        await asyncio.sleep(0.02)
        assert service.polls == polls_at_cancel


class TestRun:
    @pytest.mark.asyncio
    async def test_submits_then_waits(self) -> None:
        service = ScriptedService([{"state": "complete", "output": {"documentFileId": "wf-3"}}])
        jobs = _make_jobs(service)

        output = await jobs.run(JobKind.MARKUP_BURN, _request())

        assert output == {"documentFileId": "wf-3"}
        assert len(service.submitted) == 1
