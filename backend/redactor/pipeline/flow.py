"""
The redaction flow — the fixed, ordered step list for every run.

    Upload (parallel) → Merge → OCR → Search context → PII detection →
    Markup → Burn → Flatten → OCR → Split (parallel) → Combined output

Each step consumes the workfile id written to the context by the step
before it, so the order below is also the dependency order.
"""

from __future__ import annotations

from redactor.pipeline.services import PipelineServices
from redactor.pipeline.step import PipelineStep
from redactor.pipeline.steps.build_search_context import BuildSearchContextStep
from redactor.pipeline.steps.burn_markup import BurnMarkupStep
from redactor.pipeline.steps.create_markup import CreateMarkupStep
from redactor.pipeline.steps.detect_pii import DetectPiiStep
from redactor.pipeline.steps.flatten_document import FlattenDocumentStep
from redactor.pipeline.steps.make_searchable import MakeSearchableStep
from redactor.pipeline.steps.merge_documents import MergeDocumentsStep
from redactor.pipeline.steps.split_document import SplitDocumentStep
from redactor.pipeline.steps.upload_inputs import UploadInputsStep
from redactor.pipeline.steps.write_combined_output import WriteCombinedOutputStep


def redaction_flow(services: PipelineServices) -> list[PipelineStep]:
    settings = services.settings
    return [
        UploadInputsStep(
            services.store,
            services.search_context,
            max_concurrency=settings.MAX_CONCURRENT_REQUESTS,
        ),
        MergeDocumentsStep(services.conversion),
        MakeSearchableStep(
            services.conversion,
            source_attr="combined_id",
            target_attr="searchable_id",
            language=settings.OCR_LANGUAGE,
            step_name="make_searchable",
        ),
        BuildSearchContextStep(services.search_context),
        DetectPiiStep(services.pii_detection),
        CreateMarkupStep(services.markup),
        BurnMarkupStep(services.burn),
        FlattenDocumentStep(services.conversion),
        MakeSearchableStep(
            services.conversion,
            source_attr="flattened_id",
            target_attr="final_id",
            language=settings.OCR_LANGUAGE,
            step_name="make_final_searchable",
        ),
        SplitDocumentStep(services.split),
        WriteCombinedOutputStep(
            services.store,
            combined_name=settings.COMBINED_OUTPUT_NAME,
            output_format=settings.OUTPUT_FORMAT,
        ),
    ]
