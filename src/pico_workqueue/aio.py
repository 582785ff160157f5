"""Coroutine-based variant of ``WorkQueue``.

``AsyncWorkQueue`` runs ``async def`` workers on the current event loop.
Each dispatched payload becomes an asyncio task; its outcome is fed back
into the queue's completion path, so hooks, ordering and slot accounting
are exactly those of ``WorkQueue``.

Example:
    >>> async def fetch(url):
    ...     return await client.get(url)
    >>> queue = AsyncWorkQueue(fetch, 4)
    >>> pages = await asyncio.gather(*(queue.push(u) for u in urls))
    >>> await queue.drained()
"""

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Optional

from .exceptions import InvalidConfigurationError
from .hooks import QueueHooks
from .queue import WorkQueue
from .task import UNBOUND, wake


def _forward(done: Callable[..., Any], future: asyncio.Future) -> None:
    if future.cancelled():
        done(asyncio.CancelledError(), None)
        return
    error = future.exception()
    if error is not None:
        done(error, None)
    else:
        done(None, future.result())


class AsyncWorkQueue(WorkQueue):
    """``WorkQueue`` whose handler is a coroutine function.

    Args:
        worker: ``async def worker(payload)``, or ``worker(context, payload)``
            when *context* is given.  Its return value is the task result and
            any exception it raises is the task error.
        concurrency: Maximum number of worker coroutines running at once.
        context: Optional object passed first to the worker and callbacks.
        hooks: Initial ``QueueHooks``.
        name: Label used in log messages and container events.

    Pushing is allowed from anywhere, but dispatch needs a running event
    loop; a worker dispatched without one completes with the
    ``RuntimeError`` asyncio raises.
    """

    def __init__(
        self,
        worker: Callable[..., Awaitable[Any]],
        concurrency: int,
        context: Any = UNBOUND,
        *,
        hooks: Optional[QueueHooks] = None,
        name: str = "default",
    ):
        if not callable(worker):
            raise InvalidConfigurationError(f"Queue worker must be callable, got {worker!r}")
        self._worker = worker
        self.tasks: "set[asyncio.Task]" = set()
        super().__init__(self._run_worker, concurrency, context, hooks=hooks, name=name)

    def _run_worker(self, *args: Any) -> None:
        *call_args, done = args
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._worker(*call_args))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        task.add_done_callback(partial(_forward, done))

    async def drained(self) -> None:
        """Wait until the queue is idle.  Returns at once if it already is."""
        waiter = asyncio.get_running_loop().create_future()
        self.when_drained(partial(wake, waiter))
        await waiter
