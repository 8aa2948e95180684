"""
Pydantic Settings — centralized configuration loaded from environment variables.

Settings are built once by the CLI and passed explicitly to every
component that needs them.  Nothing reads the environment on import.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from redactor.core.constants import ConversionFormat


class Settings(BaseSettings):
    # ── Document processing service ───────────
    PD_SERVER_BASE: str = Field(..., min_length=1)
    HTTP_TIMEOUT_SECONDS: float = Field(60.0, gt=0)

    # ── Polling / deadlines ───────────────────
    POLL_INTERVAL_SECONDS: float = Field(1.0, gt=0)
    JOB_TIMEOUT_SECONDS: float | None = Field(None, gt=0)
    RUN_TIMEOUT_SECONDS: float | None = Field(None, gt=0)

    # ── Concurrency ───────────────────────────
    MAX_CONCURRENT_REQUESTS: int = Field(8, ge=1)

    # ── Files ─────────────────────────────────
    INPUT_DIR: str = "input_files"
    OUTPUT_DIR: str = "output_files"
    OUTPUT_FORMAT: ConversionFormat = ConversionFormat.PDF
    COMBINED_OUTPUT_NAME: str = "__combined"

    # ── OCR ───────────────────────────────────
    OCR_LANGUAGE: str = "english"

    # ── Logging ───────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # ── LangSmith Tracing ────────────────────
    LANGSMITH_API_KEY: str = ""
    LANGSMITH_ENDPOINT: str = "https://api.smith.langchain.com"
    LANGSMITH_PROJECT: str = "document-redactor"
    LANGSMITH_TRACING: bool = False

    # ── Application ───────────────────────────
    APP_ENV: str = "development"

    model_config = {"env_file": [".env"], "extra": "ignore"}

    @property
    def server_base(self) -> str:
        """Service base URL without a trailing slash."""
        return self.PD_SERVER_BASE.rstrip("/")
