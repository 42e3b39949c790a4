"""
Tests for Skeleton Crew Event Bus
=================================

Tests delivery order, fault isolation, snapshots and async emission.
"""

import asyncio

import pytest

from skeleton_crew.core.event_bus import EventBus, Subscription


class TestSubscriptions:
    """Tests for subscribing and unsubscribing."""

    def test_subscribe_and_receive(self, event_bus):
        """Should deliver event data to a subscribed handler."""
        received = []
        event_bus.on("document:saved", received.append)

        event_bus.emit("document:saved", {"id": 7})

        assert received == [{"id": 7}]

    def test_emit_without_subscribers(self, event_bus):
        """Should be a no-op when nobody listens."""
        assert event_bus.emit("nobody:listens", 1) == 0

    def test_delivery_in_subscription_order(self, event_bus):
        """Handlers should run in the order they subscribed."""
        order = []
        event_bus.on("tick", lambda data: order.append("first"))
        event_bus.on("tick", lambda data: order.append("second"))
        event_bus.on("tick", lambda data: order.append("third"))

        event_bus.emit("tick")

        assert order == ["first", "second", "third"]

    def test_unsubscribe(self, event_bus):
        """Should stop delivery after unsubscribe."""
        received = []
        unsubscribe = event_bus.on("tick", received.append)

        event_bus.emit("tick", 1)
        unsubscribe()
        event_bus.emit("tick", 2)

        assert received == [1]

    def test_unsubscribe_is_idempotent(self, event_bus):
        """Calling unsubscribe twice should not raise or remove other handlers."""
        received = []
        unsubscribe = event_bus.on("tick", lambda data: None)
        event_bus.on("tick", received.append)

        unsubscribe()
        unsubscribe()
        event_bus.emit("tick", "still here")

        assert received == ["still here"]
        assert event_bus.listener_count("tick") == 1

    def test_same_handler_subscribed_twice(self, event_bus):
        """Each subscription is independent."""
        received = []
        first = event_bus.on("tick", received.append)
        event_bus.on("tick", received.append)

        first()
        event_bus.emit("tick", "x")

        assert received == ["x"]

    def test_invalid_subscription(self, event_bus):
        """Should reject empty event names and non-callable handlers."""
        with pytest.raises(ValueError):
            event_bus.on("", lambda data: None)
        with pytest.raises(TypeError):
            event_bus.on("tick", "not callable")


class TestFaultIsolation:
    """Tests that one failing handler never affects the others."""

    def test_failing_handler_does_not_stop_delivery(self, event_bus):
        """Handlers after a failing one should still run."""
        received = []

        def broken(data):
            raise ValueError("boom")

        event_bus.on("tick", received.append)
        event_bus.on("tick", broken)
        event_bus.on("tick", received.append)

        delivered = event_bus.emit("tick", "data")

        assert received == ["data", "data"]
        assert delivered == 2
        assert event_bus.get_stats()["events_failed"] == 1

    def test_failure_is_logged(self, event_bus, caplog):
        """Handler failures should be logged with the event name."""

        def broken(data):
            raise ValueError("boom")

        event_bus.on("tick", broken)

        with caplog.at_level("ERROR", logger="CREW_EventBus"):
            event_bus.emit("tick")

        assert 'Event handler for "tick" threw error' in caplog.text


class TestSnapshotIteration:
    """Tests that each emission iterates a snapshot of subscribers."""

    def test_handler_added_during_emit_waits_for_next_emit(self, event_bus):
        """A subscription made during delivery should not receive that delivery."""
        late = []

        def subscriber(data):
            event_bus.on("tick", late.append)

        event_bus.on("tick", subscriber)

        event_bus.emit("tick", 1)
        assert late == []

        event_bus.emit("tick", 2)
        assert late == [2]

    def test_handler_removed_during_emit_still_receives(self, event_bus):
        """An unsubscription during delivery should apply from the next emission."""
        received = []
        handles = {}

        def remover(data):
            handles["second"]()

        event_bus.on("tick", remover)
        handles["second"] = event_bus.on("tick", received.append)

        event_bus.emit("tick", 1)
        event_bus.emit("tick", 2)

        assert received == [1]


class TestWildcards:
    """Tests for wildcard subscriptions."""

    def test_prefix_wildcard(self, event_bus):
        """Prefix patterns should match only events with that prefix."""
        received = []
        event_bus.on("user:*", received.append)

        event_bus.emit("user:login", "a")
        event_bus.emit("order:placed", "b")

        assert received == ["a"]

    def test_catch_all_in_subscription_order(self, event_bus):
        """Wildcard and exact handlers should interleave by subscription order."""
        order = []
        event_bus.on("user:login", lambda data: order.append("exact-1"))
        event_bus.on("*", lambda data: order.append("all"))
        event_bus.on("user:login", lambda data: order.append("exact-2"))

        event_bus.emit("user:login")

        assert order == ["exact-1", "all", "exact-2"]

    def test_subscription_matches(self):
        """Subscription.matches should honor exact names and prefixes."""
        exact = Subscription(event="a:b", handler=print, sequence=1)
        prefix = Subscription(event="a:*", handler=print, sequence=2)

        assert exact.matches("a:b")
        assert not exact.matches("a:bc")
        assert prefix.matches("a:anything")
        assert not prefix.matches("b:x")


class TestAsyncEmission:
    """Tests for emit_async and async handlers."""

    @pytest.mark.asyncio
    async def test_emit_async_waits_for_handlers(self, event_bus):
        """emit_async should return after every async handler finished."""
        received = []

        async def slow(data):
            await asyncio.sleep(0.01)
            received.append(data)

        event_bus.on("tick", slow)
        event_bus.on("tick", received.append)

        await event_bus.emit_async("tick", "x")

        assert sorted(received) == ["x", "x"]

    @pytest.mark.asyncio
    async def test_emit_async_isolates_failures(self, event_bus):
        """Async and sync failures should be logged, never raised."""
        received = []

        async def async_broken(data):
            raise RuntimeError("async boom")

        def sync_broken(data):
            raise RuntimeError("sync boom")

        event_bus.on("tick", async_broken)
        event_bus.on("tick", sync_broken)
        event_bus.on("tick", received.append)

        await event_bus.emit_async("tick", 1)

        assert received == [1]
        assert event_bus.get_stats()["events_failed"] == 2

    @pytest.mark.asyncio
    async def test_sync_emit_schedules_async_handlers(self, event_bus):
        """Async handlers invoked by emit should run on the current loop."""
        done = asyncio.Event()

        async def handler(data):
            done.set()

        event_bus.on("tick", handler)
        delivered = event_bus.emit("tick")

        assert delivered == 1
        await asyncio.wait_for(done.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_scheduled_handler_failure_is_counted(self, event_bus):
        """A failure inside a scheduled async handler should be recorded."""

        async def handler(data):
            raise RuntimeError("later boom")

        event_bus.on("tick", handler)
        event_bus.emit("tick")

        for _ in range(5):
            await asyncio.sleep(0)

        stats = event_bus.get_stats()
        assert stats["events_failed"] == 1
        assert stats["pending_handlers"] == 0

    def test_sync_emit_without_loop_drops_async_handler(self, event_bus):
        """Without a running loop, async handlers are closed, not run."""
        ran = []

        async def handler(data):
            ran.append(data)

        event_bus.on("tick", handler)
        event_bus.emit("tick", 1)

        assert ran == []


class TestStats:
    """Tests for counters and housekeeping."""

    def test_listener_count(self, event_bus):
        """Should count all subscriptions or only those matching an event."""
        event_bus.on("a", lambda data: None)
        event_bus.on("b", lambda data: None)
        event_bus.on("*", lambda data: None)

        assert event_bus.listener_count() == 3
        assert event_bus.listener_count("a") == 2

    def test_stats(self, event_bus):
        """Should track published and delivered counts."""
        event_bus.on("a", lambda data: None)
        event_bus.emit("a")
        event_bus.emit("b")

        stats = event_bus.get_stats()
        assert stats["events_published"] == 2
        assert stats["events_delivered"] == 1
        assert stats["subscribers"] == 1

    def test_clear(self, event_bus):
        """Should drop every subscription."""
        received = []
        event_bus.on("a", received.append)
        event_bus.on("*", received.append)

        event_bus.clear()
        event_bus.emit("a")

        assert received == []
        assert event_bus.listener_count() == 0


def test_buses_are_isolated():
    """Two buses should never share subscribers."""
    first, second = EventBus(), EventBus()
    received = []
    first.on("tick", received.append)

    second.emit("tick", "other")

    assert received == []
