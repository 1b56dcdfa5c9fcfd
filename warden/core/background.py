"""Detached execution of notification side effects.

Account operations must not wait for, or fail because of, email delivery.
``NotificationDispatcher.dispatch`` starts the delivery as an asyncio task and
returns immediately; the task logs any failure and swallows it.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Set

import structlog

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Spawns notifier calls as background tasks and keeps them alive until done.

    The event loop holds only weak references to tasks, so every pending
    task is kept in ``_tasks`` and removed by its done callback.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(
        self,
        factory: Callable[[], Awaitable[Any]],
        *,
        operation: str,
        **context: Any,
    ) -> asyncio.Task:
        """Run ``factory()`` in the background.

        Must be called from a running event loop. Failures never propagate to
        the caller; they are logged under ``operation`` with ``context``.
        """
        task = asyncio.create_task(self._run(factory, operation, context), name=f"notify:{operation}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, factory: Callable[[], Awaitable[Any]], operation: str, context: dict) -> None:
        try:
            await factory()
        except asyncio.CancelledError:
            logger.warning("Notification cancelled", operation=operation, **context)
            raise
        except Exception as e:
            # Intentionally non-propagating: the account operation already succeeded.
            logger.error(
                "Notification failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
        else:
            logger.debug("Notification delivered", operation=operation, **context)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for every pending notification to finish.

        Tasks still running after ``timeout`` seconds are cancelled.
        """
        if not self._tasks:
            return
        pending = list(self._tasks)
        logger.debug("Draining notifications", pending=len(pending))
        done, not_done = await asyncio.wait(pending, timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            logger.warning("Notifications cancelled on drain timeout", cancelled=len(not_done))
            await asyncio.gather(*not_done, return_exceptions=True)


dispatcher = NotificationDispatcher()
