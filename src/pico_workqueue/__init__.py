from .aio import AsyncWorkQueue
from .bootstrap import init
from .config import QueueConfig
from .events import QueueEvent, QueueEventKind
from .exceptions import (
    AbandonedTaskError,
    DuplicateCompletionError,
    HandlerError,
    InvalidArgumentError,
    InvalidConfigurationError,
    WorkQueueError,
)
from .hooks import QueueHooks
from .queue import WorkQueue
from .scheduler import QueueScheduler
from .task import UNBOUND, Task, TaskHandle, TaskState


def create(handler, concurrency, context=UNBOUND, **kwargs) -> WorkQueue:
    """Shorthand for ``WorkQueue(handler, concurrency, context, **kwargs)``."""
    return WorkQueue(handler, concurrency, context, **kwargs)


__all__ = [
    "create",
    "init",
    "WorkQueue",
    "AsyncWorkQueue",
    "QueueHooks",
    "QueueConfig",
    "QueueScheduler",
    "QueueEvent",
    "QueueEventKind",
    "Task",
    "TaskHandle",
    "TaskState",
    "UNBOUND",
    "WorkQueueError",
    "InvalidConfigurationError",
    "InvalidArgumentError",
    "HandlerError",
    "DuplicateCompletionError",
    "AbandonedTaskError",
]
