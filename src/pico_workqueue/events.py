"""Queue notifications published on the pico-ioc ``EventBus``.

Queues created through ``QueueScheduler`` publish a ``QueueEvent`` whenever
one of their hooks fires, so other components can react to drains or
failures without holding a reference to the queue.
"""

from dataclasses import dataclass
from enum import Enum

from pico_ioc import Event


class QueueEventKind(str, Enum):
    """Which hook produced a ``QueueEvent``.

    Attributes:
        DRAIN: The queue went idle.
        EMPTY: The last pending task was dispatched.
        SATURATED: Every concurrency slot is in use.
        ERROR: A task completed with an error, or completed twice.
    """

    DRAIN = "drain"
    EMPTY = "empty"
    SATURATED = "saturated"
    ERROR = "error"


@dataclass
class QueueEvent(Event):
    """Event published when a managed queue fires a hook.

    Args:
        queue_name: Name the queue was registered under.
        kind: The ``QueueEventKind`` that fired.
        detail: ``repr`` of the error for ``ERROR`` events, else empty.
    """

    queue_name: str
    kind: QueueEventKind
    detail: str = ""
