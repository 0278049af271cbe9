"""Langfuse integration for vision LLM observability.

Tracing is optional. Every helper degrades to a no-op when Langfuse is
disabled or failed to initialize, so callers never branch on it.
"""

from __future__ import annotations

import contextlib
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from langfuse import Langfuse

if TYPE_CHECKING:
    from collections.abc import Generator

    from langfuse.client import StatefulGenerationClient, StatefulTraceClient

    from src.commons.settings.models import LangfuseSettings

logger = logging.getLogger(__name__)


@dataclass
class _LangfuseState:
    client: Langfuse | None = None
    enabled: bool = False
    current_trace: ContextVar[Any] = field(
        default_factory=lambda: ContextVar("langfuse_trace", default=None)
    )


_state = _LangfuseState()


def init_langfuse(settings: LangfuseSettings) -> bool:
    """Initialize the global Langfuse client.

    Args:
        settings: Langfuse configuration settings.

    Returns:
        True if tracing is active after the call.
    """
    _state.enabled = False
    if not settings.enabled:
        logger.info("Langfuse tracing disabled")
        return False

    if not settings.public_key or not settings.secret_key:
        logger.warning("Langfuse keys not configured, tracing disabled")
        return False

    try:
        _state.client = Langfuse(
            public_key=settings.public_key,
            secret_key=settings.secret_key,
            host=settings.host,
        )
    except Exception as e:
        logger.error("Failed to initialize Langfuse", extra={"error": str(e)})
        return False

    _state.enabled = True
    logger.info("Langfuse initialized", extra={"host": settings.host})
    return True


def shutdown_langfuse() -> None:
    """Flush pending events and drop the client."""
    if _state.client is None:
        return
    try:
        _state.client.flush()
        _state.client.shutdown()
    except Exception as e:
        logger.error("Error shutting down Langfuse", extra={"error": str(e)})
    finally:
        _state.client = None
        _state.enabled = False


def is_langfuse_enabled() -> bool:
    """Check if Langfuse tracing is enabled."""
    return _state.enabled and _state.client is not None


@contextmanager
def langfuse_trace(
    name: str,
    metadata: dict[str, Any] | None = None,
    tags: list[str] | None = None,
) -> Generator[StatefulTraceClient | None, None, None]:
    """Open a trace that nested LLM generations attach to.

    Args:
        name: Name of the trace, e.g. ``visual_indexing``.
        metadata: Optional metadata such as recording and org ids.
        tags: Optional list of tags.

    Yields:
        The trace object or None if Langfuse is not enabled.
    """
    if not is_langfuse_enabled():
        yield None
        return

    token = None
    trace_obj = None
    try:
        trace_obj = _state.client.trace(  # type: ignore[union-attr]
            name=name,
            metadata=metadata or {},
            tags=tags or [],
        )
        token = _state.current_trace.set(trace_obj)
    except Exception as e:
        logger.error("Error creating Langfuse trace", extra={"error": str(e)})

    try:
        yield trace_obj
    finally:
        if token is not None:
            with contextlib.suppress(ValueError):
                _state.current_trace.reset(token)


def create_llm_generation(
    name: str,
    model: str,
    input_messages: list[dict[str, Any]],
    model_parameters: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> StatefulGenerationClient | None:
    """Start tracking an LLM generation.

    Attaches to the trace opened by ``langfuse_trace`` when there is one,
    otherwise opens a standalone trace.

    Args:
        name: Name of the generation (e.g., "describe_frame").
        model: Model identifier.
        input_messages: Input messages sent to the LLM, images stripped.
        model_parameters: Model parameters (temperature, max_tokens, etc.).
        metadata: Additional metadata.

    Returns:
        The generation object for updating with output, or None if disabled.
    """
    if not is_langfuse_enabled():
        return None

    parent = _state.current_trace.get()
    try:
        if parent is None:
            parent = _state.client.trace(name=f"standalone_{name}")  # type: ignore[union-attr]
        return parent.generation(
            name=name,
            model=model,
            input=input_messages,
            model_parameters=model_parameters or {},
            metadata=metadata or {},
        )
    except Exception as e:
        logger.error("Error creating LLM generation", extra={"error": str(e)})
        return None


def end_llm_generation(
    generation: StatefulGenerationClient | None,
    output: str | dict[str, Any] | None,
    usage: dict[str, int] | None = None,
    level: str = "DEFAULT",
    status_message: str | None = None,
) -> None:
    """Close a generation with its output and token usage.

    Args:
        generation: The generation object to update.
        output: The LLM output.
        usage: Token usage dict with prompt_tokens, completion_tokens, total_tokens.
        level: Langfuse level (DEFAULT, WARNING, ERROR).
        status_message: Optional status message, usually the error text.
    """
    if generation is None:
        return

    try:
        generation.end(
            output=output,
            usage=usage,
            level=level,
            status_message=status_message,
        )
    except Exception as e:
        logger.error("Error ending LLM generation", extra={"error": str(e)})
