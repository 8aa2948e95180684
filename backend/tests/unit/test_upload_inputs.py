import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from redactor.ingestion.input_scanner import scan_inputs
from redactor.pipeline.context import PipelineContext
from redactor.pipeline.errors import StepExecutionError, UploadError
from redactor.pipeline.steps.upload_inputs import UploadInputsStep


def _make_ctx(input_dir: Path, output_dir: Path, files: dict[str, bytes]) -> PipelineContext:
    for name, content in files.items():
        (input_dir / name).write_bytes(content)
    ctx = PipelineContext(input_dir=input_dir, output_dir=output_dir)
    ctx.input_files = scan_inputs(input_dir)
    return ctx


def _make_step(
    delays: dict[bytes, float] | None = None,
    pages: dict[str, int] | None = None,
    failing: bytes | None = None,
) -> tuple[UploadInputsStep, AsyncMock, AsyncMock, list[bytes]]:
    """Store and search-context mocks keyed on file content; returns finished uploads too."""
    delays = delays or {}
    pages = pages or {}
    finished: list[bytes] = []

    async def upload(content, content_type, extension):
        await asyncio.sleep(delays.get(content, 0))
        if content == failing:
            raise UploadError("Workfile creation failed", status_code=500)
        finished.append(content)
        return f"wf-{content.decode()}"

    async def discover(content_id):
        return f"ctx-{content_id}", pages.get(content_id, 1)

    store = AsyncMock()
    store.upload.side_effect = upload
    search_context = AsyncMock()
    search_context.discover.side_effect = discover
    return UploadInputsStep(store, search_context), store, search_context, finished


class TestInputOrder:
    @pytest.mark.asyncio
    async def test_inputs_keep_scan_order_when_uploads_finish_out_of_order(
        self, input_dir: Path, output_dir: Path,
    ) -> None:
        ctx = _make_ctx(input_dir, output_dir, {"a.pdf": b"a", "b.docx": b"b", "c.eml": b"c"})
        step, _, _, finished = _make_step(
            delays={b"a": 0.03, b"b": 0.0, b"c": 0.01},
            pages={"wf-a": 3, "wf-b": 2, "wf-c": 1},
        )

        result = await step.execute(ctx)

        assert finished == [b"b", b"c", b"a"]
        assert [d.filename for d in ctx.inputs] == ["a.pdf", "b.docx", "c.eml"]
        assert [d.index for d in ctx.inputs] == [0, 1, 2]
        assert [d.content_id for d in ctx.inputs] == ["wf-a", "wf-b", "wf-c"]
        assert [d.page_count for d in ctx.inputs] == [3, 2, 1]
        assert result.metadata == {"files": 3, "total_pages": 6}

    @pytest.mark.asyncio
    async def test_uploads_with_extension_and_content_type(
        self, input_dir: Path, output_dir: Path,
    ) -> None:
        ctx = _make_ctx(input_dir, output_dir, {"report.DOCX": b"r"})
        step, store, _, _ = _make_step()

        await step.execute(ctx)

        store.upload.assert_awaited_once_with(
            b"r",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "docx",
        )

    @pytest.mark.asyncio
    async def test_file_read_runs_off_the_event_loop(
        self, input_dir: Path, output_dir: Path, monkeypatch,
    ) -> None:
        ctx = _make_ctx(input_dir, output_dir, {"a.pdf": b"a"})
        step, _, _, _ = _make_step()
        threaded = []
        original = asyncio.to_thread

        async def spy(func, *args, **kwargs):
            threaded.append(func)
            return await original(func, *args, **kwargs)

        monkeypatch.setattr(asyncio, "to_thread", spy)

        await step.execute(ctx)

        assert threaded == [ctx.input_files[0].read]


class TestFailures:
    @pytest.mark.asyncio
    async def test_one_failed_upload_fails_the_step_and_cancels_the_rest(
        self, input_dir: Path, output_dir: Path,
    ) -> None:
        ctx = _make_ctx(input_dir, output_dir, {"a.pdf": b"a", "b.pdf": b"b", "c.pdf": b"c"})
        step, _, search_context, finished = _make_step(
            delays={b"a": 1.0, b"b": 0.0, b"c": 1.0},
            failing=b"b",
        )

        with pytest.raises(UploadError):
            await step.execute(ctx)

        await asyncio.sleep(0.01)
        assert finished == []
        search_context.discover.assert_not_awaited()
        assert ctx.inputs == []

    @pytest.mark.asyncio
    async def test_zero_page_input_rejected(self, input_dir: Path, output_dir: Path) -> None:
        ctx = _make_ctx(input_dir, output_dir, {"a.pdf": b"a", "empty.pdf": b"e"})
        step, _, _, _ = _make_step(pages={"wf-a": 2, "wf-e": 0})

        with pytest.raises(StepExecutionError, match="empty.pdf has no pages") as exc_info:
            await step.execute(ctx)

        assert exc_info.value.step_name == "upload_inputs"
        assert exc_info.value.details == {"file_id": "wf-e", "context_id": "ctx-wf-e"}

    @pytest.mark.asyncio
    async def test_no_input_files_rejected(self, input_dir: Path, output_dir: Path) -> None:
        step, store, _, _ = _make_step()

        with pytest.raises(StepExecutionError):
            await step.execute(PipelineContext(input_dir=input_dir, output_dir=output_dir))

        store.upload.assert_not_awaited()
