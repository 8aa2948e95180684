from pathlib import Path

import pytest

from redactor import main as cli
from redactor.core.constants import PipelineStatus
from redactor.pipeline.engine import PipelineResult


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PD_SERVER_BASE", raising=False)
    monkeypatch.setenv("LANGSMITH_TRACING", "false")


class TestMain:
    def test_missing_server_base_exits_1(self) -> None:
        assert cli.main([]) == 1

    def test_invalid_setting_is_named_in_the_error(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("PD_SERVER_BASE", "http://pd.invalid")
        monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0")

        assert cli.main([]) == 1

        out = capsys.readouterr().out
        assert "Invalid configuration" in out
        assert "POLL_INTERVAL_SECONDS" in out
        assert "PD_SERVER_BASE" not in out

    def test_empty_input_directory_exits_1(self, monkeypatch, input_dir: Path) -> None:
        monkeypatch.setenv("PD_SERVER_BASE", "http://pd.invalid")

        assert cli.main(["--input-dir", str(input_dir)]) == 1

    def test_successful_run_exits_0(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PD_SERVER_BASE", "http://pd.invalid")
        calls = []

        async def fake_run(settings, input_dir, output_dir, client=None):
            calls.append((input_dir, output_dir))
            return PipelineResult(execution_id="e-1", status=PipelineStatus.COMPLETED)

        monkeypatch.setattr(cli, "run_pipeline", fake_run)

        assert cli.main(["--output-dir", str(tmp_path / "out")]) == 0
        assert calls == [(Path("input_files"), tmp_path / "out")]

    def test_failed_run_exits_1(self, monkeypatch) -> None:
        monkeypatch.setenv("PD_SERVER_BASE", "http://pd.invalid")

        async def fake_run(settings, input_dir, output_dir, client=None):
            return PipelineResult(
                execution_id="e-1",
                status=PipelineStatus.FAILED,
                error="merge failed",
                failed_step="merge_documents",
            )

        monkeypatch.setattr(cli, "run_pipeline", fake_run)

        assert cli.main([]) == 1
