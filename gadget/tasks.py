"""
Isolated execution of route handlers.

Handlers are contributed by plugins, so anything they raise is caught and
logged here instead of reaching the dispatcher.
"""

import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 16


class TaskRunner:
    """Runs handlers on a thread pool behind a failure boundary."""

    def __init__(self, max_workers: int | None = None):
        self.max_workers = max_workers or DEFAULT_MAX_WORKERS
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="gadget-task",
        )

    def run_isolated(
        self,
        task_name: str,
        fn: Callable[..., Any],
        *args: Any,
        context: Optional[dict[str, Any]] = None,
    ) -> Future:
        """
        Schedule ``fn(*args)`` without waiting for it.

        Args:
            task_name: Name used in logs (usually the route name)
            fn: Callable to run
            context: Extra fields logged under ``context`` if the task fails

        Returns:
            Future resolving to fn's result, or None if it raised
        """
        return self._executor.submit(self._run, task_name, fn, args, context or {})

    def _run(
        self,
        task_name: str,
        fn: Callable[..., Any],
        args: tuple,
        context: dict[str, Any],
    ) -> Any:
        try:
            return fn(*args)
        except Exception as e:
            trace_id = uuid.uuid4().hex
            logger.exception(
                f"Task '{task_name}' failed [trace {trace_id}]: {e}",
                extra={"task": task_name, "trace_id": trace_id, "context": context},
            )
            return None

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks; optionally wait for running ones."""
        self._executor.shutdown(wait=wait)
