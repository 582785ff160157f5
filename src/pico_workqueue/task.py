"""Task records and the handles returned to submitters.

A ``Task`` lives in the queue's pending buffer until it is dispatched and is
dropped once its completion has been delivered.  The ``TaskHandle`` is the
submitter's view of the same unit of work: it can be awaited on an asyncio
event loop or observed through ``add_done_callback``.
"""

import asyncio
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from .exceptions import AbandonedTaskError, HandlerError

UNBOUND = object()
"""Marker for "no bound context"; ``None`` is a valid context of its own."""


class TaskState(str, Enum):
    """Lifecycle of a submitted task as seen through its handle.

    Attributes:
        PENDING: Queued or in flight.
        FINISHED: The handler reported completion.
        ABANDONED: Dropped by ``kill()`` before it was dispatched.
    """

    PENDING = "pending"
    FINISHED = "finished"
    ABANDONED = "abandoned"


def as_exception(error: Any) -> BaseException:
    """Return *error* itself if it is an exception, else wrap it in ``HandlerError``."""
    if isinstance(error, BaseException):
        return error
    return HandlerError(error)


def _release_waiter(waiter: asyncio.Future):
    if not waiter.done():
        waiter.set_result(None)


def wake(waiter: asyncio.Future) -> None:
    """Release *waiter* from whichever thread the completion arrives on."""
    loop = waiter.get_loop()
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        _release_waiter(waiter)
    else:
        loop.call_soon_threadsafe(_release_waiter, waiter)


class TaskHandle:
    """Completion handle for one pushed payload.

    Both completion styles observe the same event: callbacks registered with
    ``add_done_callback`` run with the handle as their only argument, and
    ``await handle`` returns the result or raises the error.  Errors that
    are not exception instances are raised as ``HandlerError``; the raw value
    stays available on ``handle.error``.

    Abandoned handles never run their callbacks.  Awaiting one raises
    ``AbandonedTaskError``.
    """

    def __init__(self, payload: Any):
        self.payload = payload
        self._lock = threading.Lock()
        self._state = TaskState.PENDING
        self._error: Any = None
        self._result: Any = None
        self._callbacks: List[Callable[["TaskHandle"], Any]] = []
        self._waiters: List[asyncio.Future] = []

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def abandoned(self) -> bool:
        return self._state is TaskState.ABANDONED

    @property
    def error(self) -> Any:
        """The raw error value the handler reported, or ``None``."""
        return self._error

    def done(self) -> bool:
        return self._state is not TaskState.PENDING

    def result(self) -> Any:
        """Return the handler's result, raising its error if it reported one.

        Raises:
            asyncio.InvalidStateError: The task has not completed yet.
            AbandonedTaskError: The task was dropped by ``kill()``.
        """
        if self._state is TaskState.PENDING:
            raise asyncio.InvalidStateError(f"Task for payload {self.payload!r} has not completed")
        if self._state is TaskState.ABANDONED:
            raise AbandonedTaskError(self.payload)
        if self._error is not None:
            raise as_exception(self._error)
        return self._result

    def exception(self) -> Optional[BaseException]:
        if self._state is TaskState.PENDING:
            raise asyncio.InvalidStateError(f"Task for payload {self.payload!r} has not completed")
        if self._state is TaskState.ABANDONED:
            return AbandonedTaskError(self.payload)
        return None if self._error is None else as_exception(self._error)

    def add_done_callback(self, fn: Callable[["TaskHandle"], Any]) -> None:
        """Run ``fn(handle)`` on completion, or right away if already finished."""
        with self._lock:
            if self._state is TaskState.PENDING:
                self._callbacks.append(fn)
                return
            finished = self._state is TaskState.FINISHED
        if finished:
            fn(self)

    def _finish(self, error: Any, result: Any) -> None:
        with self._lock:
            if self._state is not TaskState.PENDING:
                return
            self._state = TaskState.FINISHED
            self._error = error
            self._result = result
            callbacks, self._callbacks = self._callbacks, []
            waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            wake(waiter)
        for fn in callbacks:
            fn(self)

    def _abandon(self) -> None:
        with self._lock:
            if self._state is not TaskState.PENDING:
                return
            self._state = TaskState.ABANDONED
            self._callbacks = []
            waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            wake(waiter)

    def __await__(self):
        with self._lock:
            waiter = None
            if self._state is TaskState.PENDING:
                waiter = asyncio.get_running_loop().create_future()
                self._waiters.append(waiter)
        if waiter is not None:
            yield from waiter.__await__()
        return self.result()

    def __repr__(self):
        return f"<TaskHandle payload={self.payload!r} state={self._state.value}>"


@dataclass(eq=False)
class Task:
    """One unit of submitted work.

    Attributes:
        payload: Value handed to the handler.
        callback: Optional ``callback(error, result)`` supplied to ``push``;
            receives the bound context first when the queue has one.
        context: The queue's bound context, or ``UNBOUND``.
        handle: The ``TaskHandle`` returned to the submitter.
    """

    payload: Any
    callback: Optional[Callable[..., Any]] = None
    context: Any = UNBOUND
    handle: Optional[TaskHandle] = None

    def settle(self, error: Any, result: Any) -> None:
        """Deliver the handler's outcome to the callback and then the handle."""
        callback, self.callback = self.callback, None
        try:
            if callback is not None:
                if self.context is not UNBOUND:
                    callback(self.context, error, result)
                else:
                    callback(error, result)
        finally:
            if self.handle is not None:
                self.handle._finish(error, result)

    def abandon(self) -> None:
        self.callback = None
        if self.handle is not None:
            self.handle._abandon()
