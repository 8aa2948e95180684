import json
from collections.abc import Callable
from itertools import count
from pathlib import Path

import httpx
import pytest

from redactor.core.config import Settings
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.content_store import ContentStore
from redactor.remote.jobs import RemoteJobClient


class FakeProcessingService:
    """In-memory stand-in for the document processing service.

    Documents are JSON lists of page labels, so conversions can be checked
    end to end: merging concatenates page lists, page extraction slices
    them and burning tags every page with the number of marks applied.
    """

    def __init__(self, polls_before_complete: int = 1) -> None:
        self.polls_before_complete = polls_before_complete
        self.files: dict[str, bytes] = {}
        self.jobs: dict[str, dict] = {}
        self.entities: list[dict] = []
        self.requests: list[tuple[str, str]] = []
        self.submitted: list[tuple[str, dict]] = []
        self.uploads: list[dict] = []
        self.fail_job: Callable[[str, dict], bool] = lambda resource, payload: False
        self.forced_state: Callable[[str, dict], str | None] = lambda resource, payload: None
        self._ids = count(1)

    # ── helpers used by tests ─────────────────────

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def pages(self, file_id: str) -> list[str]:
        return json.loads(self.files[file_id])

    def submitted_to(self, resource: str) -> list[dict]:
        return [payload for res, payload in self.submitted if res == resource]

    def add_file(self, pages: list[str]) -> str:
        file_id = f"wf-{next(self._ids)}"
        self.files[file_id] = json.dumps(pages).encode()
        return file_id

    # ── request routing ───────────────────────────

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.lstrip("/")
        self.requests.append((request.method, path))

        if path == "PCCIS/V1/WorkFile" and request.method == "POST":
            return self._upload(request)
        if path.startswith("PCCIS/V1/WorkFile/") and request.method == "GET":
            file_id = path.rsplit("/", 1)[-1]
            if file_id not in self.files:
                return httpx.Response(404, json={"errorCode": "WorkFileNotFound"})
            return httpx.Response(200, content=self.files[file_id])
        if path.startswith("v2/searchContexts/") and path.endswith("/records"):
            job = self.jobs[path.split("/")[2]]
            return httpx.Response(200, json={"pages": [{} for _ in self.pages(job["file_id"])]})
        if path.startswith("v2/piiDetectors/") and path.endswith("/entities"):
            return httpx.Response(200, json={"entities": self.entities})

        for resource in (
            "v2/contentConverters",
            "v2/searchContexts",
            "v2/piiDetectors",
            "PCCIS/V1/MarkupBurner",
        ):
            if path == resource and request.method == "POST":
                return self._submit(resource, json.loads(request.content)["input"])
            if path.startswith(resource + "/") and request.method == "GET":
                return self._poll(path.rsplit("/", 1)[-1])

        return httpx.Response(404, json={"errorCode": "NotFound", "path": path})

    def _upload(self, request: httpx.Request) -> httpx.Response:
        extension = request.url.params["FileExtension"]
        self.uploads.append({
            "extension": extension,
            "content_type": request.headers["content-type"],
            "body": request.content,
        })
        file_id = f"wf-{next(self._ids)}"
        self.files[file_id] = request.content
        return httpx.Response(200, json={"fileId": file_id})

    def _submit(self, resource: str, payload: dict) -> httpx.Response:
        self.submitted.append((resource, payload))
        job_id = f"job-{next(self._ids)}"
        job = {
            "resource": resource,
            "input": payload,
            "polls": 0,
            "failed": self.fail_job(resource, payload),
            "forced": self.forced_state(resource, payload),
        }
        if resource == "v2/searchContexts":
            job["file_id"] = payload["fileId"]
        self.jobs[job_id] = job
        key = "contextId" if resource == "v2/searchContexts" else "processId"
        return httpx.Response(200, json={key: job_id})

    def _poll(self, job_id: str) -> httpx.Response:
        job = self.jobs[job_id]
        job["polls"] += 1
        if job["forced"] is not None:
            return httpx.Response(200, json={"state": job["forced"]})
        if job["polls"] <= self.polls_before_complete:
            return httpx.Response(200, json={"state": "processing"})
        if job["failed"]:
            return httpx.Response(200, json={
                "state": "failed",
                "output": {"errorCode": "ProcessingFailed"},
            })
        return httpx.Response(200, json={"state": "complete", "output": self._output(job)})

    def _output(self, job: dict) -> dict:
        resource, payload = job["resource"], job["input"]
        if resource == "v2/contentConverters":
            pages: list[str] = []
            for source in payload["sources"]:
                source_pages = self.pages(source["fileId"])
                if "pages" in source:
                    start, end = (int(n) for n in source["pages"].split("-"))
                    source_pages = source_pages[start - 1:end]
                pages.extend(source_pages)
            return {"results": [{"fileId": self.add_file(pages)}]}
        if resource == "PCCIS/V1/MarkupBurner":
            marks = json.loads(self.files[payload["markupFileId"]])["marks"]
            pages = [f"{p}+{len(marks)}marks" for p in self.pages(payload["documentFileId"])]
            return {"documentFileId": self.add_file(pages)}
        return {}


@pytest.fixture()
def fake_service() -> FakeProcessingService:
    return FakeProcessingService()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        PD_SERVER_BASE="http://pd.test",
        POLL_INTERVAL_SECONDS=0.001,
        _env_file=None,
    )


@pytest.fixture()
async def service_client(fake_service: FakeProcessingService):
    client = ProcessingServiceClient("http://pd.test", transport=fake_service.transport())
    yield client
    await client.aclose()


@pytest.fixture()
def jobs(service_client: ProcessingServiceClient) -> RemoteJobClient:
    return RemoteJobClient(service_client, poll_interval=0.001)


@pytest.fixture()
def store(service_client: ProcessingServiceClient) -> ContentStore:
    return ContentStore(service_client)


@pytest.fixture()
def input_dir(tmp_path: Path) -> Path:
    path = tmp_path / "input_files"
    path.mkdir()
    return path


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output_files"
