"""
Request/response schemas for the document processing service.

One model per remote operation input and output.  The service speaks
camelCase JSON; models use snake_case attributes with camelCase aliases
and are serialised with ``to_wire()``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from redactor.core.constants import (
    MARK_BORDER_THICKNESS,
    MARK_COLOR,
    MARK_INTERACTION_MODE,
    MARK_OPACITY,
    MARK_TYPE,
    ConversionFormat,
)


class ServiceModel(BaseModel):
    """Base for every wire model: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialise for a request body, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ═══════════════════════════════════════════════════════════
#  Workfiles
# ═══════════════════════════════════════════════════════════

class UploadResponse(ServiceModel):
    file_id: str = Field(..., min_length=1)


# ═══════════════════════════════════════════════════════════
#  Jobs (generic)
# ═══════════════════════════════════════════════════════════

class JobCreated(ServiceModel):
    """Submit response.  Converters answer with processId, search contexts with contextId."""

    process_id: str | None = None
    context_id: str | None = None

    @model_validator(mode="after")
    def _require_identifier(self) -> "JobCreated":
        if not (self.process_id or self.context_id):
            raise ValueError("response carries neither processId nor contextId")
        return self

    @property
    def job_id(self) -> str:
        return self.process_id or self.context_id  # type: ignore[return-value]


class JobStatus(ServiceModel):
    """Poll response.  ``state`` stays a raw string so unknown values can be reported."""

    state: str | None = None
    output: Any = None


# ═══════════════════════════════════════════════════════════
#  Content conversion
# ═══════════════════════════════════════════════════════════

class SourceFile(ServiceModel):
    file_id: str = Field(..., min_length=1)
    pages: str | None = None


class OcrOptions(ServiceModel):
    language: str = "english"


class PdfOptions(ServiceModel):
    ocr: OcrOptions | None = None


class ConversionDest(ServiceModel):
    format: ConversionFormat
    pdf_options: PdfOptions | None = None


class ConversionRequest(ServiceModel):
    sources: list[SourceFile] = Field(..., min_length=1)
    dest: ConversionDest


class ConversionResult(ServiceModel):
    file_id: str = Field(..., min_length=1)


class ConversionOutput(ServiceModel):
    results: list[ConversionResult] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════
#  Search contexts
# ═══════════════════════════════════════════════════════════

class SearchContextRequest(ServiceModel):
    document_identifier: str = Field(..., min_length=1)
    file_id: str = Field(..., min_length=1)
    source: str = "workFile"


class SearchContextRecords(ServiceModel):
    pages: list[Any] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════
#  PII detection
# ═══════════════════════════════════════════════════════════

class PiiDetectorRequest(ServiceModel):
    context_id: str = Field(..., min_length=1)


class Rectangle(ServiceModel):
    model_config = ConfigDict(extra="allow")

    x: float
    y: float
    width: float
    height: float


class PageData(ServiceModel):
    model_config = ConfigDict(extra="allow")

    width: float
    height: float


class LineGroup(ServiceModel):
    lines: list[Rectangle] = Field(default_factory=list)
    page_data: PageData | None = None


class PiiEntity(ServiceModel):
    model_config = ConfigDict(extra="allow")

    page_index: int = Field(..., ge=0)
    line_groups: list[LineGroup] = Field(default_factory=list)


class PiiEntitiesResponse(ServiceModel):
    entities: list[PiiEntity] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════
#  Markup
# ═══════════════════════════════════════════════════════════

class MarkupMark(ServiceModel):
    uid: str
    page_number: int = Field(..., ge=1)
    rectangle: Rectangle
    page_data: PageData | None = None
    creation_date_time: str
    modification_date_time: str
    type: str = MARK_TYPE
    interaction_mode: str = MARK_INTERACTION_MODE
    data: dict[str, Any] = Field(default_factory=dict)
    border_color: str = MARK_COLOR
    border_thickness: int = MARK_BORDER_THICKNESS
    fill_color: str = MARK_COLOR
    opacity: int = MARK_OPACITY


class MarkupLayer(ServiceModel):
    marks: list[MarkupMark] = Field(default_factory=list)


class MarkupBurnRequest(ServiceModel):
    document_file_id: str = Field(..., min_length=1)
    markup_file_id: str = Field(..., min_length=1)


class MarkupBurnOutput(ServiceModel):
    document_file_id: str = Field(..., min_length=1)
