"""Bounded-concurrency FIFO work queue.

``WorkQueue`` hands pushed payloads to a handler, keeping at most
``concurrency`` of them outstanding.  The handler receives each payload
together with a ``done(error, result)`` completion callback and may call it
synchronously or at any later point, from any thread.

Example:
    >>> def handler(payload, done):
    ...     done(None, payload * 2)
    >>> queue = WorkQueue(handler, 2)
    >>> handle = queue.push(21, lambda err, result: print(result))
    42
    >>> handle.result()
    42
"""

import threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional

from .config import check_concurrency
from .exceptions import DuplicateCompletionError, InvalidArgumentError, InvalidConfigurationError
from .hooks import HookSlot, QueueHooks
from .logging import get_logger
from .task import UNBOUND, Task, TaskHandle

logger = get_logger(__name__)


class Completion:
    """The ``done`` callback handed to the handler for a single task.

    Only the first call is accounted.  Later calls are reported to the
    queue's ``error`` hook as ``DuplicateCompletionError`` and otherwise
    ignored.
    """

    __slots__ = ("_queue", "_task", "called")

    def __init__(self, queue: "WorkQueue", task: Task):
        self._queue = queue
        self._task = task
        self.called = False

    def __call__(self, error: Any = None, result: Any = None) -> None:
        with self._queue._lock:
            duplicate = self.called
            self.called = True
        if duplicate:
            logger.warning("Queue '%s': task %r completed more than once", self._queue.name, self._task.payload)
            self._queue._fire("error", DuplicateCompletionError(self._task), self._task)
            return
        self._queue._complete(self._task, error, result)


class WorkQueue:
    """FIFO queue that runs a handler with bounded concurrency.

    Args:
        handler: ``handler(payload, done)``, or ``handler(context, payload,
            done)`` when *context* is given.
        concurrency: Maximum number of handler executions outstanding at once.
        context: Optional object passed first to the handler and to every
            task callback.  ``None`` is a valid context when given
            explicitly; leaving the argument out binds nothing.
        hooks: Initial ``QueueHooks``.  Hooks can also be assigned later.
        name: Label used in log messages and container events.

    Raises:
        InvalidConfigurationError: *handler* is not callable or *concurrency*
            is not a positive integer.
    """

    drain = HookSlot()
    empty = HookSlot()
    saturated = HookSlot()
    error = HookSlot()

    def __init__(
        self,
        handler: Callable[..., Any],
        concurrency: int,
        context: Any = UNBOUND,
        *,
        hooks: Optional[QueueHooks] = None,
        name: str = "default",
    ):
        if not callable(handler):
            raise InvalidConfigurationError(f"Queue handler must be callable, got {handler!r}")
        self._handler = handler
        self._concurrency = check_concurrency(concurrency)
        self._context = context
        self.name = name

        self._lock = threading.RLock()
        self._pending: Deque[Task] = deque()
        self._in_flight = 0
        self._paused = False
        self._started = False
        self._dispatching = False
        self._drain_waiters: List[Callable[[], Any]] = []
        self._listeners: List[Callable[..., Any]] = []

        hooks = hooks or QueueHooks()
        self.drain = hooks.drain
        self.empty = hooks.empty
        self.saturated = hooks.saturated
        self.error = hooks.error

    @property
    def context(self) -> Any:
        """The bound context, or ``None`` when nothing is bound."""
        return None if self._context is UNBOUND else self._context

    @property
    def has_context(self) -> bool:
        return self._context is not UNBOUND

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @concurrency.setter
    def concurrency(self, value: int) -> None:
        value = check_concurrency(value)
        with self._lock:
            self._concurrency = value
        self._dispatch()

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def started(self) -> bool:
        """Whether anything has ever been pushed."""
        return self._started

    def push(self, payload: Any, callback: Optional[Callable[..., Any]] = None) -> TaskHandle:
        """Queue *payload* at the tail and dispatch if a slot is free."""
        return self._enqueue(payload, callback, front=False)

    def unshift(self, payload: Any, callback: Optional[Callable[..., Any]] = None) -> TaskHandle:
        """Queue *payload* at the head so it is dispatched before older work."""
        return self._enqueue(payload, callback, front=True)

    def _enqueue(self, payload: Any, callback: Optional[Callable[..., Any]], front: bool) -> TaskHandle:
        if callback is not None and not callable(callback):
            raise InvalidArgumentError(f"Task callback must be callable, got {callback!r}")
        task = Task(payload=payload, callback=callback, context=self._context, handle=TaskHandle(payload))
        with self._lock:
            self._started = True
            if front:
                self._pending.appendleft(task)
            else:
                self._pending.append(task)
        self._dispatch()
        return task.handle

    def pause(self) -> None:
        with self._lock:
            self._paused = True

    def resume(self) -> None:
        with self._lock:
            self._paused = False
        self._dispatch()

    def kill(self) -> int:
        """Drop every pending task without running it.

        Dropped tasks are abandoned: their callbacks never fire.  In-flight
        executions are left alone and still complete normally.

        Returns:
            The number of tasks dropped.
        """
        with self._lock:
            dropped = list(self._pending)
            self._pending.clear()
        for task in dropped:
            task.abandon()
        if dropped:
            logger.debug("Queue '%s': abandoned %d pending tasks", self.name, len(dropped))
        return len(dropped)

    def kill_and_drain(self) -> int:
        """``kill()``, then fire ``drain`` once and disable the hook.

        ``when_drained`` waiters are only released here if nothing is in
        flight; otherwise they wait for the last running task to finish.
        """
        dropped = self.kill()
        drain = self.drain
        self.drain = None
        with self._lock:
            waiters = []
            if self._in_flight == 0:
                waiters, self._drain_waiters = self._drain_waiters, []
        try:
            drain()
        finally:
            self._notify("drain")
            for fn in waiters:
                fn()
        return dropped

    def idle(self) -> bool:
        with self._lock:
            return not self._pending and self._in_flight == 0

    def running(self) -> int:
        """Number of tasks dispatched and not yet completed."""
        return self._in_flight

    def length(self) -> int:
        """Number of tasks waiting for a slot."""
        return len(self._pending)

    def pending_payloads(self) -> List[Any]:
        with self._lock:
            return [task.payload for task in self._pending]

    def when_drained(self, fn: Callable[[], Any]) -> None:
        """Call *fn* once the queue next goes idle, or immediately if it is idle."""
        with self._lock:
            if self._pending or self._in_flight:
                self._drain_waiters.append(fn)
                return
        fn()

    def add_listener(self, fn: Callable[..., Any]) -> None:
        """Observe every hook firing as ``fn(hook_name, *args)``.

        Listeners run after the hook itself and are unaffected by later hook
        assignment, so they see firings even when the hook is replaced or
        disabled.
        """
        self._listeners.append(fn)

    def _notify(self, hook: str, *args: Any) -> None:
        for fn in list(self._listeners):
            fn(hook, *args)

    def _fire(self, hook: str, *args: Any) -> None:
        try:
            getattr(self, hook)(*args)
        finally:
            self._notify(hook, *args)

    def _dispatch(self) -> None:
        # Only one dispatch loop runs at a time.  Completions and pushes that
        # arrive while it is active just update state; the loop re-checks
        # under the lock before it exits.  A failing hook, handler or
        # callback never stops it from filling free slots: the first error
        # is raised once the loop is done.
        with self._lock:
            if self._dispatching:
                return
            self._dispatching = True
        failure = None
        while True:
            with self._lock:
                if self._paused or not self._pending or self._in_flight >= self._concurrency:
                    self._dispatching = False
                    break
                task = self._pending.popleft()
                self._in_flight += 1
                emptied = not self._pending
                saturated = self._in_flight == self._concurrency
            try:
                try:
                    if emptied:
                        self._fire("empty")
                    if saturated:
                        self._fire("saturated")
                finally:
                    self._run(task)
            except Exception as exc:
                if failure is None:
                    failure = exc
            except BaseException:
                with self._lock:
                    self._dispatching = False
                raise
        if failure is not None:
            raise failure

    def _run(self, task: Task) -> None:
        done = Completion(self, task)
        try:
            if self._context is not UNBOUND:
                self._handler(self._context, task.payload, done)
            else:
                self._handler(task.payload, done)
        except Exception as exc:
            if done.called:
                raise
            logger.debug("Queue '%s': handler raised for %r, completing with error", self.name, task.payload)
            done(exc, None)

    def _complete(self, task: Task, error: Any, result: Any) -> None:
        try:
            if error is not None:
                self._fire("error", error, task)
            task.settle(error, result)
        finally:
            with self._lock:
                self._in_flight -= 1
                drained = not self._pending and self._in_flight == 0
                waiters = []
                if drained:
                    waiters, self._drain_waiters = self._drain_waiters, []
            try:
                if drained:
                    self._fire_drain(waiters)
            finally:
                self._dispatch()

    def _fire_drain(self, waiters: List[Callable[[], Any]]) -> None:
        try:
            self._fire("drain")
        finally:
            for fn in waiters:
                fn()

    def __repr__(self):
        return (
            f"<WorkQueue name={self.name!r} concurrency={self._concurrency} "
            f"running={self._in_flight} pending={len(self._pending)} paused={self._paused}>"
        )
