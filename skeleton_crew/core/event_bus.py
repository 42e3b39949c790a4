# CREW_FEAT: event-bus-001
"""
Skeleton Crew - Event Bus
=========================

Topic-based publish/subscribe scoped to one runtime instance.

Features:
- Delivery in subscription order
- Per-handler fault isolation (failures are logged, never propagated)
- Synchronous emit and awaitable emit_async
- Wildcard subscriptions ("*" and "prefix:*")

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

# Lifecycle topics emitted by the runtime
RUNTIME_INITIALIZED = "runtime:initialized"
RUNTIME_SHUTDOWN = "runtime:shutdown"

# Type alias for event handlers (sync or async)
EventHandler = Callable[[Any], Optional[Awaitable[None]]]


@dataclass(frozen=True)
class Subscription:
    """Event subscription."""

    event: str
    handler: EventHandler
    sequence: int

    @property
    def is_wildcard(self) -> bool:
        return self.event.endswith("*")

    def matches(self, event: str) -> bool:
        """Check whether this subscription receives ``event``."""
        if not self.is_wildcard:
            return self.event == event
        return event.startswith(self.event[:-1])


class EventBus:
    """
    Event bus for plugin communication.

    Handlers run in the order they subscribed. Each emission iterates over a
    snapshot of the subscriber list taken when the emission starts.

    Example:
        bus = EventBus()

        def on_saved(data):
            print(f"Saved: {data}")

        unsubscribe = bus.on("document:saved", on_saved)
        bus.emit("document:saved", {"id": 7})
        await bus.emit_async("document:saved", {"id": 8})
        unsubscribe()
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_EventBus")
        self._exact: Dict[str, List[Subscription]] = defaultdict(list)
        self._wildcards: List[Subscription] = []
        self._sequence = 0
        # Awaitables returned to a synchronous emit keep running here
        self._pending: Set[asyncio.Future] = set()
        self._stats = {
            "events_published": 0,
            "events_delivered": 0,
            "events_failed": 0,
        }

    def on(self, event: str, handler: EventHandler) -> Callable[[], None]:
        """
        Subscribe to an event.

        Args:
            event: Event name, or a wildcard pattern ending in "*"
            handler: Sync or async callable receiving the event data

        Returns:
            Idempotent unsubscribe function
        """
        if not isinstance(event, str) or not event:
            raise ValueError("Event name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f'Handler for "{event}" must be callable')

        self._sequence += 1
        subscription = Subscription(event=event, handler=handler, sequence=self._sequence)

        if subscription.is_wildcard:
            self._wildcards.append(subscription)
        else:
            self._exact[event].append(subscription)

        self._logger.debug(f"Subscription added: {event} (#{subscription.sequence})")

        def unsubscribe() -> None:
            self._remove(subscription)

        return unsubscribe

    def _remove(self, subscription: Subscription) -> None:
        if subscription.is_wildcard:
            if subscription in self._wildcards:
                self._wildcards.remove(subscription)
                self._logger.debug(f"Subscription removed: {subscription.event}")
            return

        subscriptions = self._exact.get(subscription.event)
        if subscriptions and subscription in subscriptions:
            subscriptions.remove(subscription)
            if not subscriptions:
                del self._exact[subscription.event]
            self._logger.debug(f"Subscription removed: {subscription.event}")

    def _snapshot(self, event: str) -> List[Subscription]:
        """Matching subscriptions in subscription order."""
        matched = list(self._exact.get(event, ()))
        wildcards = [s for s in self._wildcards if s.matches(event)]
        if wildcards:
            matched.extend(wildcards)
            matched.sort(key=lambda s: s.sequence)
        return matched

    def emit(self, event: str, data: Any = None) -> int:
        """
        Deliver an event synchronously.

        A handler failure is logged and does not stop delivery to the
        remaining handlers. Awaitables returned by async handlers are
        scheduled on the running loop.

        Returns:
            Number of handlers invoked without raising
        """
        self._stats["events_published"] += 1
        delivered = 0

        for subscription in self._snapshot(event):
            try:
                result = subscription.handler(data)
            except Exception as e:
                self._record_failure(event, e)
                continue

            if inspect.isawaitable(result):
                self._schedule(event, result)
            delivered += 1
            self._stats["events_delivered"] += 1

        return delivered

    async def emit_async(self, event: str, data: Any = None) -> None:
        """
        Deliver an event and wait for every handler to settle.

        Handlers start in subscription order. Failures, whether raised
        synchronously or by the awaited result, are logged and never
        propagate to the caller.
        """
        self._stats["events_published"] += 1
        awaitables = []

        for subscription in self._snapshot(event):
            try:
                result = subscription.handler(data)
            except Exception as e:
                self._record_failure(event, e)
                continue

            if inspect.isawaitable(result):
                awaitables.append(result)
            else:
                self._stats["events_delivered"] += 1

        if not awaitables:
            return

        results = await asyncio.gather(*awaitables, return_exceptions=True)
        for outcome in results:
            if isinstance(outcome, BaseException):
                self._record_failure(event, outcome)
            else:
                self._stats["events_delivered"] += 1

    def _schedule(self, event: str, awaitable: Awaitable) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self._logger.warning(
                f'Async handler for "{event}" dropped: emit() called without a running event loop'
            )
            return

        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)

        def _done(fut: asyncio.Future) -> None:
            self._pending.discard(fut)
            if fut.cancelled():
                return
            error = fut.exception()
            if error is not None:
                self._record_failure(event, error)

        future.add_done_callback(_done)

    def _record_failure(self, event: str, error: BaseException) -> None:
        self._stats["events_failed"] += 1
        self._logger.error(f'Event handler for "{event}" threw error: {error!r}')

    def listener_count(self, event: Optional[str] = None) -> int:
        """Count subscriptions, optionally only those matching ``event``."""
        if event is None:
            return sum(len(subs) for subs in self._exact.values()) + len(self._wildcards)
        return len(self._snapshot(event))

    def get_stats(self) -> Dict[str, Any]:
        """Get event bus statistics."""
        return {
            **self._stats,
            "subscribers": self.listener_count(),
            "pending_handlers": len(self._pending),
        }

    def clear(self) -> None:
        """Drop every subscription. Used during shutdown."""
        self._exact.clear()
        self._wildcards.clear()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "RUNTIME_INITIALIZED",
    "RUNTIME_SHUTDOWN",
    "EventHandler",
    "Subscription",
    "EventBus",
]
