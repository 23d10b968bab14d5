"""Bounded, paced execution of async tasks.

ConcurrencyThrottle runs a batch of zero-argument coroutine factories with
at most ``max_concurrent`` in flight. Each of the ``max_concurrent`` slots
pulls the next task from one FIFO queue; after finishing a task a slot
waits ``min_spacing_ms`` before dispatching again.

Results come back in submission order regardless of completion order. A
task that raises gets the batch fallback value in its position and never
affects its siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.constants import DEFAULT_TASK_FALLBACK
from citation_engine.core.exceptions import ThrottleError
from citation_engine.core.logging import Logger, get_logger


T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]


class ConcurrencyThrottle:
    """Run async tasks with bounded concurrency and per-slot pacing.

    Attributes:
        max_concurrent: Maximum tasks in flight at once
        min_spacing_ms: Pause between a slot freeing and its next dispatch

    Example:
        >>> throttle = ConcurrencyThrottle(max_concurrent=2, min_spacing_ms=0)
        >>> async def double(n: int) -> int:
        ...     return n * 2
        >>> asyncio.run(throttle.run_all([lambda n=n: double(n) for n in range(3)]))
        [0, 2, 4]
    """

    def __init__(
        self,
        max_concurrent: int | None = None,
        min_spacing_ms: int | None = None,
        *,
        settings: Settings | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the throttle.

        Args:
            max_concurrent: Slot count. Defaults to settings.throttle_max_concurrent.
            min_spacing_ms: Per-slot pause. Defaults to settings.throttle_min_spacing_ms.
            settings: Application settings. Uses get_settings() if not provided.
            logger: Structured logger. Defaults to the module logger.

        Raises:
            ValueError: If max_concurrent < 1 or min_spacing_ms < 0
        """
        settings = settings or get_settings()
        self.max_concurrent = (
            max_concurrent if max_concurrent is not None else settings.throttle_max_concurrent
        )
        self.min_spacing_ms = (
            min_spacing_ms if min_spacing_ms is not None else settings.throttle_min_spacing_ms
        )
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {self.max_concurrent}")
        if self.min_spacing_ms < 0:
            raise ValueError(f"min_spacing_ms must be >= 0, got {self.min_spacing_ms}")
        self._logger = logger or get_logger(__name__)

    async def run_all(
        self,
        tasks: Sequence[TaskFactory[T]],
        fallback: T = DEFAULT_TASK_FALLBACK,  # type: ignore[assignment]
    ) -> list[T]:
        """Run every task and return results in submission order.

        Args:
            tasks: Zero-argument callables returning awaitables
            fallback: Value recorded for a task that raised

        Returns:
            One result per task, same order as ``tasks``

        Raises:
            ThrottleError: If the batch itself fails (never for a task failure)
        """
        if not tasks:
            return []

        queue: asyncio.Queue[int] = asyncio.Queue()
        for position in range(len(tasks)):
            queue.put_nowait(position)

        results: list[T] = [fallback] * len(tasks)
        failures: list[int] = []
        spacing = self.min_spacing_ms / 1000

        async def worker() -> None:
            while True:
                try:
                    position = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    results[position] = await tasks[position]()
                except Exception as e:
                    failures.append(position)
                    self._logger.warning(
                        "Throttled task failed, using fallback",
                        position=position,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                if spacing and not queue.empty():
                    await asyncio.sleep(spacing)

        slots = min(self.max_concurrent, len(tasks))
        try:
            await asyncio.gather(*(worker() for _ in range(slots)))
        except Exception as e:
            raise ThrottleError("Throttled batch failed", cause=e) from e

        self._logger.debug(
            "Throttled batch complete",
            tasks=len(tasks),
            failures=len(failures),
            slots=slots,
        )
        return results


__all__ = [
    "ConcurrencyThrottle",
    "TaskFactory",
]
