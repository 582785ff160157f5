"""Lifecycle hooks fired by a ``WorkQueue``.

Hooks can be supplied up front as a ``QueueHooks`` bundle or assigned later
as plain attributes (``queue.drain = fn``).  Assigning ``None`` disables a
hook; a disabled hook is a no-op callable, so the queue never has to check
for it before firing.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .exceptions import InvalidArgumentError


def noop(*args: Any) -> None:
    pass


@dataclass
class QueueHooks:
    """Initial hook set for a queue.

    Attributes:
        drain: Called with no arguments when the queue goes idle (no pending
            and no in-flight tasks), once per transition.
        empty: Called with no arguments when the last pending task is taken
            for dispatch.
        saturated: Called with no arguments when the in-flight count reaches
            the concurrency limit.
        error: Called as ``error(error, task)`` for every task completed with
            a non-``None`` error, and for duplicate completions.
    """

    drain: Optional[Callable[[], Any]] = None
    empty: Optional[Callable[[], Any]] = None
    saturated: Optional[Callable[[], Any]] = None
    error: Optional[Callable[[Any, Any], Any]] = None


class HookSlot:
    """Descriptor holding one assignable hook on a queue instance."""

    def __set_name__(self, owner, name):
        self.name = name
        self._attr = f"_{name}_hook"

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return getattr(obj, self._attr, noop)

    def __set__(self, obj, fn):
        if fn is None:
            fn = noop
        elif not callable(fn):
            raise InvalidArgumentError(f"Hook '{self.name}' must be callable or None, got {fn!r}")
        setattr(obj, self._attr, fn)
