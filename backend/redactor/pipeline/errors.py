"""
Errors raised while redacting a batch of documents.

    PipelineError
    ├── StepExecutionError, PipelineTimeoutError, InputScanError, LocalIOError
    ├── RemoteServiceError          HTTP call to the processing service failed
    │   └── UploadError, FetchError, JobSubmitError, JobStatusError
    └── JobError                    a job finished unusably
        └── JobFailedError, UnexpectedJobStateError, JobTimeoutError, ConversionResultError

The engine stamps ``execution_id`` and ``step_name`` onto whatever a step
raises.  Nothing here is retried: the only repeated request in a run is
the status poll of a job that is still pending or processing.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base for every failure that ends a redaction run."""

    def __init__(
        self,
        message: str,
        *,
        execution_id: str | None = None,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.execution_id = execution_id
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class StepExecutionError(PipelineError):
    """A step failed during execution for a reason outside the taxonomy below."""
    pass


class PipelineTimeoutError(PipelineError):
    """The run exceeded its overall deadline and was cancelled."""
    pass


class InputScanError(PipelineError):
    """The input directory is missing, empty, or its files collide on output names."""
    pass


class LocalIOError(PipelineError):
    """Reading an input file or writing an output file failed."""
    pass


# ═══════════════════════════════════════════════════════════
#  Transport-level failures
# ═══════════════════════════════════════════════════════════

class RemoteServiceError(PipelineError):
    """A call to the document processing service failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        **kwargs,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, **kwargs)


class UploadError(RemoteServiceError):
    """Creating a workfile from local content failed."""
    pass


class FetchError(RemoteServiceError):
    """Reading content or job results back from the service failed."""
    pass


class JobSubmitError(RemoteServiceError):
    """The service refused to create a long-running job."""

    def __init__(self, message: str, *, kind: str, **kwargs) -> None:
        self.kind = kind
        super().__init__(message, **kwargs)


class JobStatusError(RemoteServiceError):
    """Checking the status of a job failed at the transport level."""

    def __init__(self, message: str, *, kind: str, job_id: str, **kwargs) -> None:
        self.kind = kind
        self.job_id = job_id
        super().__init__(message, **kwargs)


# ═══════════════════════════════════════════════════════════
#  Job outcomes
# ═══════════════════════════════════════════════════════════

class JobError(PipelineError):
    """A long-running job ended in a way the pipeline cannot use."""

    def __init__(self, message: str, *, kind: str, job_id: str | None = None, **kwargs) -> None:
        self.kind = kind
        self.job_id = job_id
        super().__init__(message, **kwargs)


class JobFailedError(JobError):
    """The service reported the job as failed."""

    def __init__(self, message: str, *, detail: object = None, **kwargs) -> None:
        self.detail = detail
        super().__init__(message, **kwargs)


class UnexpectedJobStateError(JobError):
    """The service reported a state outside the known enumeration."""

    def __init__(self, message: str, *, state: object, **kwargs) -> None:
        self.state = state
        super().__init__(message, **kwargs)


class JobTimeoutError(JobError):
    """The job did not reach a terminal state before its deadline."""
    pass


class ConversionResultError(JobError):
    """A completed job's output did not contain the expected result identifier."""
    pass
