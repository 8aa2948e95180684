"""Shared constants and enums used across the application."""

from enum import StrEnum


class PipelineStatus(StrEnum):
    """Overall status of a pipeline execution."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepStatus(StrEnum):
    """Status of an individual pipeline step."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class JobState(StrEnum):
    """States reported by the processing service for a long-running job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


class JobKind(StrEnum):
    """Kinds of long-running jobs submitted to the processing service."""

    CONVERT = "convert"
    SEARCH_CONTEXT_BUILD = "searchContextBuild"
    PII_DETECT = "piiDetect"
    MARKUP_BURN = "markupBurn"


class ConversionFormat(StrEnum):
    """Destination formats used by the content converter."""

    PDF = "pdf"
    TIFF = "tiff"


# ═══════════════════════════════════════════════════════════
#  Service resources
# ═══════════════════════════════════════════════════════════

WORKFILE_RESOURCE = "PCCIS/V1/WorkFile"
CONTENT_CONVERTERS_RESOURCE = "v2/contentConverters"
SEARCH_CONTEXTS_RESOURCE = "v2/searchContexts"
PII_DETECTORS_RESOURCE = "v2/piiDetectors"
MARKUP_BURNER_RESOURCE = "PCCIS/V1/MarkupBurner"

JOB_RESOURCES: dict[JobKind, str] = {
    JobKind.CONVERT: CONTENT_CONVERTERS_RESOURCE,
    JobKind.SEARCH_CONTEXT_BUILD: SEARCH_CONTEXTS_RESOURCE,
    JobKind.PII_DETECT: PII_DETECTORS_RESOURCE,
    JobKind.MARKUP_BURN: MARKUP_BURNER_RESOURCE,
}

# Poll states that mean "not done yet"
WAITING_STATES = frozenset({JobState.PENDING, JobState.PROCESSING})


# ═══════════════════════════════════════════════════════════
#  Content types
# ═══════════════════════════════════════════════════════════

DEFAULT_CONTENT_TYPE = "application/octet-stream"
JSON_CONTENT_TYPE = "application/json;charset=utf-8"

CONTENT_TYPES: dict[str, str] = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "eml": "text/plain",
    "pdf": "application/pdf",
}


# ═══════════════════════════════════════════════════════════
#  Markup style
# ═══════════════════════════════════════════════════════════

MARK_TYPE = "RectangleAnnotation"
MARK_INTERACTION_MODE = "SelectionDisabled"
MARK_COLOR = "#000000"
MARK_BORDER_THICKNESS = 4
MARK_OPACITY = 255
