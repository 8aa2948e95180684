"""Stage adapters for one run, built around a single service client."""

from __future__ import annotations

from dataclasses import dataclass

from redactor.core.config import Settings
from redactor.processing.burn import BurnStage
from redactor.processing.conversion import ConversionStage
from redactor.processing.markup import MarkupStage
from redactor.processing.pii_detection import PiiDetectionStage
from redactor.processing.search_context import SearchContextStage
from redactor.processing.split import SplitStage
from redactor.remote.client import ProcessingServiceClient
from redactor.remote.content_store import ContentStore
from redactor.remote.jobs import RemoteJobClient


@dataclass
class PipelineServices:
    """Everything the redaction flow's steps talk to."""

    store: ContentStore
    conversion: ConversionStage
    search_context: SearchContextStage
    pii_detection: PiiDetectionStage
    markup: MarkupStage
    burn: BurnStage
    split: SplitStage
    settings: Settings


def build_services(settings: Settings, client: ProcessingServiceClient) -> PipelineServices:
    """Wire the stage adapters onto ``client``."""
    jobs = RemoteJobClient(
        client,
        poll_interval=settings.POLL_INTERVAL_SECONDS,
        job_timeout=settings.JOB_TIMEOUT_SECONDS,
    )
    store = ContentStore(client)
    conversion = ConversionStage(jobs)
    return PipelineServices(
        store=store,
        conversion=conversion,
        search_context=SearchContextStage(jobs, client),
        pii_detection=PiiDetectionStage(jobs, client),
        markup=MarkupStage(store),
        burn=BurnStage(jobs),
        split=SplitStage(
            conversion,
            store,
            output_format=settings.OUTPUT_FORMAT,
            max_concurrency=settings.MAX_CONCURRENT_REQUESTS,
        ),
        settings=settings,
    )
