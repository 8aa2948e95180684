"""
PipelineContext — mutable state object carried through every step.

This is the single source of truth for one redaction run.  Each step
reads the workfile id produced by the step before it and writes its own.
The context lives in memory for the duration of the run only.

The ordered list of inputs is fixed when the input directory is scanned.
Concurrent steps write their per-input results by index, never append,
so completion order cannot reorder them.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from redactor.core.constants import StepStatus


# ═══════════════════════════════════════════════════════════
#  InputDocument
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InputDocument:
    """
    An input file after upload and page-count discovery.

    Args:
        index: Position in the run's fixed input order.
        filename: Name of the source file in the input directory.
        extension: Lower-cased extension, used as the upload FileExtension.
        content_id: Workfile id of the uploaded content.
        page_count: Pages reported by the input's search context.
        source_path: Local path the content was read from.
    """

    index: int
    filename: str
    extension: str
    content_id: str
    page_count: int
    source_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("source_path")
        return data


# ═══════════════════════════════════════════════════════════
#  StepResult
# ═══════════════════════════════════════════════════════════

@dataclass
class StepResult:
    """Timing and outcome of one step, kept on the context for the run summary."""

    step_name: str
    status: StepStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error: str | None = None
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("started_at", "completed_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


# ═══════════════════════════════════════════════════════════
#  PipelineContext
# ═══════════════════════════════════════════════════════════

@dataclass
class PipelineContext:
    """Carries all state between pipeline steps for one run."""

    # ─── Identity / locations (set at init) ───────────
    input_dir: Path
    output_dir: Path
    execution_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # ─── Inputs (fixed order) ─────────────────────────
    # input_files: what the scanner found.
    # inputs: the same files after upload, one slot per input file.
    input_files: list[Any] = field(default_factory=list)
    inputs: list[InputDocument] = field(default_factory=list)

    # ─── Workfile chain ───────────────────────────────
    combined_id: str | None = None
    searchable_id: str | None = None
    search_context_id: str | None = None
    entities: list[Any] = field(default_factory=list)
    markup_id: str | None = None
    burned_id: str | None = None
    flattened_id: str | None = None
    final_id: str | None = None

    # ─── Outputs ──────────────────────────────────────
    output_files: list[Path] = field(default_factory=list)
    combined_output: Path | None = None

    # ─── Execution tracking ────────────────────────────
    current_step_index: int = 0
    total_steps: int = 0
    step_results: list[StepResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return sum(doc.page_count for doc in self.inputs)

    def require(self, attr: str) -> Any:
        """Return an upstream step's output, failing loudly if it is missing."""
        value = getattr(self, attr)
        if value is None:
            raise ValueError(f"PipelineContext.{attr} must be set before this step")
        return value

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging."""
        return {
            "execution_id": self.execution_id,
            "inputs": [doc.to_dict() for doc in self.inputs],
            "total_pages": self.total_pages,
            "combined_id": self.combined_id,
            "searchable_id": self.searchable_id,
            "search_context_id": self.search_context_id,
            "entities": len(self.entities),
            "markup_id": self.markup_id,
            "burned_id": self.burned_id,
            "flattened_id": self.flattened_id,
            "final_id": self.final_id,
            "output_files": [str(p) for p in self.output_files],
            "combined_output": str(self.combined_output) if self.combined_output else None,
            "steps_completed": len(self.step_results),
            "total_steps": self.total_steps,
            "errors": self.errors,
        }
