"""Container-managed registry of named work queues.

``QueueScheduler`` is a pico-ioc singleton that builds queues with defaults
from ``QueueConfig`` (environment driven), relays their hooks to the
``EventBus`` as ``QueueEvent`` notifications and abandons their pending
work when the container shuts down.
"""

from functools import partial
from typing import Any, Callable, Dict, Optional, Type

from pico_ioc import EventBus, PicoContainer, cleanup, component, configure

from .aio import AsyncWorkQueue
from .config import QueueConfig
from .events import QueueEvent, QueueEventKind
from .exceptions import InvalidConfigurationError
from .hooks import QueueHooks
from .logging import get_logger
from .queue import WorkQueue
from .task import UNBOUND

logger = get_logger(__name__)


@component(scope="singleton")
class QueueScheduler:
    """Creates, tracks and tears down named queues.

    The default concurrency and queue name are read from
    ``PICO_WORKQUEUE_CONCURRENCY`` (default: ``10``) and
    ``PICO_WORKQUEUE_NAME`` (default: ``"default"``).

    Example:
        >>> scheduler = container.get(QueueScheduler)
        >>> queue = scheduler.create_queue(handler, name="thumbnails", concurrency=4)
        >>> queue.push(image_path)
    """

    def __init__(self):
        self.config = QueueConfig.from_env()
        self._queues: Dict[str, WorkQueue] = {}
        self._event_bus: EventBus | None = None

    @configure
    def _on_ready(self, container: PicoContainer):
        if container.has(EventBus):
            self._event_bus = container.get(EventBus)

    @property
    def queues(self) -> Dict[str, WorkQueue]:
        return dict(self._queues)

    def create_queue(
        self,
        handler: Callable[..., Any],
        name: Optional[str] = None,
        concurrency: Optional[int] = None,
        context: Any = UNBOUND,
        hooks: Optional[QueueHooks] = None,
    ) -> WorkQueue:
        """Build and register a callback-style ``WorkQueue``.

        Args:
            handler: ``handler(payload, done)``.
            name: Registry key.  Defaults to ``config.name``.
            concurrency: Slot count.  Defaults to ``config.concurrency``.
            context: Optional bound context.
            hooks: Initial hooks.  Each hook runs before the matching event is
                published, including hooks assigned to the queue later.

        Raises:
            InvalidConfigurationError: The name is taken or the arguments
                are invalid.
        """
        return self._register(WorkQueue, handler, name, concurrency, context, hooks)

    def create_async_queue(
        self,
        worker: Callable[..., Any],
        name: Optional[str] = None,
        concurrency: Optional[int] = None,
        context: Any = UNBOUND,
        hooks: Optional[QueueHooks] = None,
    ) -> AsyncWorkQueue:
        """Build and register an ``AsyncWorkQueue``; see ``create_queue``."""
        return self._register(AsyncWorkQueue, worker, name, concurrency, context, hooks)

    def get_queue(self, name: str) -> WorkQueue:
        """Return the queue registered as *name*.

        Raises:
            KeyError: No queue has that name.
        """
        return self._queues[name]

    def remove_queue(self, name: str) -> int:
        """Unregister *name* and abandon its pending tasks.

        Returns:
            The number of pending tasks dropped.
        """
        queue = self._queues.pop(name)
        return queue.kill()

    def _register(
        self,
        queue_cls: Type[WorkQueue],
        handler: Callable[..., Any],
        name: Optional[str],
        concurrency: Optional[int],
        context: Any,
        hooks: Optional[QueueHooks],
    ) -> WorkQueue:
        name = name or self.config.name
        if name in self._queues:
            raise InvalidConfigurationError(f"A queue named '{name}' is already registered")
        if concurrency is None:
            concurrency = self.config.concurrency

        queue = queue_cls(handler, concurrency, context, hooks=hooks, name=name)
        queue.add_listener(partial(self._relay, name))
        self._queues[name] = queue
        logger.debug("QueueScheduler: registered queue '%s' (concurrency=%d)", name, concurrency)
        return queue

    def _relay(self, name: str, hook: str, *args: Any):
        kind = QueueEventKind(hook)
        detail = repr(args[0]) if kind is QueueEventKind.ERROR else ""
        self._publish(QueueEvent(queue_name=name, kind=kind, detail=detail))

    def _publish(self, event: QueueEvent):
        if self._event_bus:
            self._event_bus.publish_sync(event)

    @cleanup
    def _on_shutdown(self):
        abandoned = sum(queue.kill() for queue in self._queues.values())
        logger.debug("QueueScheduler: shutting down %d queues, %d pending tasks abandoned", len(self._queues), abandoned)
        self._queues.clear()
