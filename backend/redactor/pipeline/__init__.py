"""
Pipeline Engine — step-based orchestration of one redaction run.

The engine lives in ``redactor.pipeline.engine`` and the fixed step
sequence in ``redactor.pipeline.flow``; they are not re-exported here so
that lower layers can import the error hierarchy without pulling in the
whole pipeline.
"""

from redactor.pipeline.context import InputDocument, PipelineContext, StepResult
from redactor.pipeline.step import PipelineStep

__all__ = ["InputDocument", "PipelineContext", "PipelineStep", "StepResult"]
