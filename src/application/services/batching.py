"""Sequential batches of concurrent per-frame work."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from src.commons.telemetry import get_logger
from src.domain.exceptions import PerFrameStageError
from src.domain.models import FrameOutcome

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")

logger = get_logger(__name__)


async def run_frame_batches(
    stage: str,
    items: Sequence[ItemT],
    worker: Callable[[ItemT], Awaitable[ResultT]],
    frame_number: Callable[[ItemT], int],
    batch_size: int,
) -> list[FrameOutcome[ResultT]]:
    """Run ``worker`` over frames in fixed-size batches.

    Batches run one after another; the items of a batch run concurrently.
    A failing item is captured as a ``PerFrameStageError`` in its own outcome
    and never cancels its siblings or later batches.

    Args:
        stage: Stage name used in errors and logs.
        items: Frames to process, in order.
        worker: Coroutine function applied to each frame.
        frame_number: Extracts the frame number of an item.
        batch_size: Maximum items in flight at once.

    Returns:
        One outcome per item, in input order.

    Raises:
        ValueError: If batch_size is less than 1.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    async def run_one(item: ItemT) -> FrameOutcome[ResultT]:
        number = frame_number(item)
        try:
            value = await worker(item)
        except Exception as e:
            error = PerFrameStageError(stage, number, str(e))
            logger.warning(
                "Frame stage failed",
                extra={
                    "stage": stage,
                    "frame_number": number,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            return FrameOutcome(frame_number=number, error=str(error))
        return FrameOutcome(frame_number=number, value=value)

    outcomes: list[FrameOutcome[ResultT]] = []
    total_batches = (len(items) + batch_size - 1) // batch_size

    for batch_index, start in enumerate(range(0, len(items), batch_size), start=1):
        batch = items[start : start + batch_size]
        outcomes.extend(await asyncio.gather(*(run_one(item) for item in batch)))
        logger.debug(
            "Frame batch processed",
            extra={
                "stage": stage,
                "batch": batch_index,
                "total_batches": total_batches,
                "batch_size": len(batch),
            },
        )

    return outcomes
