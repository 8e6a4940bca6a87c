"""Best-effort execution of optional enrichment steps."""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def best_effort(operation: Callable[[], Awaitable[T]], label: str) -> Optional[T]:
    """Run an optional step, turning any failure into ``None``.

    Failures are logged and never propagate past this call. Cancellation is
    not an ``Exception`` and still propagates.

    Args:
        operation: Zero-argument coroutine factory
        label: Name of the step for log messages

    Returns:
        The step's result, or None if it failed
    """
    try:
        return await operation()
    except Exception as e:
        logger.warning(f"{label} failed, continuing without it: {e}")
        return None
