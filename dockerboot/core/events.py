"""In-process async event bus.

Handlers are registered per event type. ``publish`` hands the event to every
handler registered for its type as a separate asyncio task and returns
without waiting for them, so a slow handler (an image pull, say) never
blocks the publisher. Handler failures are logged; there is no path back to
the publisher.

Usage:
    @event_bus.subscribe(ContainerEvent)
    async def on_container_event(event: ContainerEvent):
        ...

    await event_bus.publish(ContainerEvent(action=ContainerAction.START, source=self))
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Type

import structlog

from ..models.container import ContainerAction

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], Awaitable[None]]


@dataclass
class Event:
    """Base class for bus events."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc), kw_only=True)


@dataclass
class ContainerEvent(Event):
    """Request an action on managed containers.

    ``key`` targets a single manager; ``None`` reaches every manager.
    """

    action: ContainerAction
    source: Any = None
    key: Optional[str] = None

    def targets(self, key: str) -> bool:
        return self.key is None or self.key == key


class EventBus:
    """Type-keyed publish/subscribe bus for asyncio applications."""

    def __init__(self):
        self._handlers: Dict[Type[Event], List[Handler]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()

    def register_handler(self, event_type: Type[Event], handler: Handler) -> None:
        """Register ``handler`` for events of ``event_type``."""
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)
            logger.debug(
                "Registered event handler",
                event_type=event_type.__name__,
                handler=getattr(handler, "__qualname__", repr(handler)),
            )

    def unregister_handler(self, event_type: Type[Event], handler: Handler) -> None:
        """Remove a previously registered handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def subscribe(self, event_type: Type[Event]) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register_handler`."""

        def decorator(handler: Handler) -> Handler:
            self.register_handler(event_type, handler)
            return handler

        return decorator

    def handler_count(self, event_type: Type[Event]) -> int:
        return len(self._handlers.get(event_type, []))

    async def publish(self, event: Event) -> int:
        """Dispatch ``event`` to its handlers.

        Returns:
            Number of handlers the event was delivered to
        """
        handlers = list(self._handlers.get(type(event), []))
        if not handlers:
            logger.debug("No handlers for event", event_type=type(event).__name__)
            return 0

        for handler in handlers:
            task = asyncio.create_task(self._dispatch(handler, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return len(handlers)

    async def wait_for_pending(self, timeout: Optional[float] = None) -> None:
        """Wait until every in-flight delivery has finished."""
        while self._pending:
            pending = list(self._pending)
            done, not_done = await asyncio.wait(pending, timeout=timeout)
            if not_done:
                logger.warning(
                    "Event deliveries still running after timeout",
                    pending=len(not_done),
                    timeout=timeout,
                )
                return

    def clear(self) -> None:
        """Drop every registered handler."""
        self._handlers.clear()

    async def _dispatch(self, handler: Handler, event: Event) -> None:
        try:
            await handler(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Event handler failed",
                event_type=type(event).__name__,
                handler=getattr(handler, "__qualname__", repr(handler)),
                error=str(e),
                exc_info=True,
            )


# Global event bus instance
event_bus = EventBus()
