"""
Optional LangSmith traces for calls to the processing service.

Each stage adapter method that runs a remote job is decorated with
``traceable_step``.  Until ``setup_tracing`` enables it the decorator is
a pass-through, so a run without a LangSmith key behaves identically.
"""

from __future__ import annotations

import functools
import os
from typing import Any, Awaitable, Callable, TypeVar

from langsmith import traceable

from redactor.core.config import Settings
from redactor.core.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

_tracing_enabled = False


def setup_tracing(settings: Settings) -> bool:
    """Export the LangSmith settings for the SDK.  Returns whether tracing is on."""
    global _tracing_enabled

    _tracing_enabled = bool(settings.LANGSMITH_TRACING and settings.LANGSMITH_API_KEY)
    if not _tracing_enabled:
        logger.debug("LangSmith tracing disabled", tracing_flag=settings.LANGSMITH_TRACING)
        return False

    os.environ.update({
        "LANGSMITH_API_KEY": settings.LANGSMITH_API_KEY,
        "LANGSMITH_ENDPOINT": settings.LANGSMITH_ENDPOINT,
        "LANGSMITH_PROJECT": settings.LANGSMITH_PROJECT,
        "LANGSMITH_TRACING": "true",
    })
    logger.info("LangSmith tracing enabled", project=settings.LANGSMITH_PROJECT)
    return True


def is_tracing_enabled() -> bool:
    return _tracing_enabled


def traceable_step(
    name: str,
    run_type: str = "tool",
    metadata: dict[str, Any] | None = None,
    tags: list[str] | None = None,
) -> Callable[[F], F]:
    """
    Trace an async stage method as ``name`` when tracing is enabled.

    Every trace is tagged ``redaction`` in addition to ``tags``.
    """
    def decorator(func: F) -> F:
        traced = traceable(
            name=name,
            run_type=run_type,
            metadata={"component": func.__qualname__, **(metadata or {})},
            tags=["redaction", *(tags or [])],
        )(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            target = traced if _tracing_enabled else func
            return await target(*args, **kwargs)
        return wrapper  # type: ignore[return-value]
    return decorator
