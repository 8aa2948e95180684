"""Command-line entry point: redact every file in the input directory."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from redactor.core.config import Settings
from redactor.core.logging import get_logger, setup_logging
from redactor.core.tracing import setup_tracing
from redactor.pipeline.engine import PipelineEngine, PipelineResult
from redactor.pipeline.flow import redaction_flow
from redactor.pipeline.services import build_services
from redactor.remote.client import ProcessingServiceClient


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="redactor",
        description="Redact PII from documents using a remote document processing service.",
    )
    parser.add_argument("--input-dir", type=Path, help="Directory of documents to redact")
    parser.add_argument("--output-dir", type=Path, help="Directory for redacted output")
    return parser.parse_args(argv)


async def run_pipeline(
    settings: Settings,
    input_dir: Path,
    output_dir: Path,
    client: ProcessingServiceClient | None = None,
) -> PipelineResult:
    """Run one redaction over ``input_dir`` against the configured service."""
    client = client or ProcessingServiceClient(
        settings.server_base,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    async with client:
        engine = PipelineEngine(
            steps=redaction_flow(build_services(settings, client)),
            output_format=settings.OUTPUT_FORMAT,
            combined_name=settings.COMBINED_OUTPUT_NAME,
            run_timeout=settings.RUN_TIMEOUT_SECONDS,
        )
        return await engine.run(input_dir, output_dir)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        setup_logging("INFO")
        invalid = {
            ".".join(str(p) for p in err["loc"]): err["msg"]
            for err in exc.errors()
        }
        get_logger("startup").error("Invalid configuration", fields=invalid)
        return 1

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    setup_tracing(settings)
    logger = get_logger("startup")

    input_dir = args.input_dir or Path(settings.INPUT_DIR)
    output_dir = args.output_dir or Path(settings.OUTPUT_DIR)
    logger.info(
        "Redaction run starting",
        env=settings.APP_ENV,
        server=settings.server_base,
        input_dir=str(input_dir),
        output_dir=str(output_dir),
    )

    result = asyncio.run(run_pipeline(settings, input_dir, output_dir))

    if not result.succeeded:
        logger.error(
            "Redaction run failed",
            execution_id=result.execution_id,
            failed_step=result.failed_step,
            error_type=result.error_type,
            error=result.error,
        )
        return 1

    summary = result.context_summary
    logger.info(
        "Redaction run complete",
        execution_id=result.execution_id,
        output_files=summary.get("output_files"),
        combined_output=summary.get("combined_output"),
        duration_ms=result.total_duration_ms,
    )
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nProcess interrupted by user")
        sys.exit(1)
