"""
Integration Tests for Skeleton Crew Runtime
===========================================

Exercises plugins, actions, events and services together, and checks that
runtime instances never share state.
"""

import asyncio
import textwrap

import pytest

from skeleton_crew import (
    RUNTIME_SHUTDOWN,
    ActionDefinition,
    Plugin,
    PluginDefinition,
    Runtime,
    RuntimeState,
    ScreenDefinition,
)


class StoragePlugin(Plugin):
    """Provides an in-memory store as a service."""

    name = "storage"

    async def setup(self, context):
        self.items = []
        context.services.register("storage", self.items)

    async def dispose(self, context):
        self.items.clear()


class NotesPlugin(Plugin):
    """Adds notes through an action and announces them as events."""

    name = "notes"
    dependencies = ["storage"]

    async def setup(self, context):
        store = context.services.get("storage")

        async def add_note(params, ctx):
            store.append(params["text"])
            await ctx.events.emit_async("notes:added", {"count": len(store)})
            return len(store)

        context.actions.register_action(ActionDefinition("notes:add", add_note, timeout_ms=1000))
        context.screens.register_screen(ScreenDefinition("notes", "Notes", "NotesView"))


class AuditPlugin(Plugin):
    """Records every notes event."""

    name = "audit"
    dependencies = ["notes"]

    def __init__(self):
        super().__init__()
        self.log = []

    async def setup(self, context):
        context.events.on("notes:*", self.log.append)


class TestPluginCollaboration:
    """Tests for plugins cooperating through the context."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self):
        """Plugins registered in any order should cooperate after initialize."""
        audit = AuditPlugin()
        storage = StoragePlugin()
        runtime = Runtime()
        runtime.register_plugin(audit)
        runtime.register_plugin(NotesPlugin())
        runtime.register_plugin(storage)

        await runtime.initialize()
        ctx = runtime.get_context()

        assert ctx.plugins.get_initialized_plugins() == ["storage", "notes", "audit"]
        assert await ctx.actions.run_action("notes:add", {"text": "first"}) == 1
        assert await ctx.actions.run_action("notes:add", {"text": "second"}) == 2
        assert audit.log == [{"count": 1}, {"count": 2}]

        await runtime.shutdown()

        assert storage.items == []
        assert runtime.state == RuntimeState.SHUTDOWN

    @pytest.mark.asyncio
    async def test_shutdown_event_sees_live_services(self):
        """runtime:shutdown handlers should still reach services."""
        seen = []
        runtime = Runtime()
        runtime.register_plugin(StoragePlugin())

        await runtime.initialize()
        ctx = runtime.get_context()
        ctx.services.get("storage").append("kept")
        ctx.events.on(
            RUNTIME_SHUTDOWN,
            lambda data: seen.append(list(data["context"].services.get("storage"))),
        )

        await runtime.shutdown()

        assert seen == [["kept"]]

    @pytest.mark.asyncio
    async def test_concurrent_actions(self):
        """Independent action invocations should interleave."""
        order = []

        async def slow(params, ctx):
            order.append(f"start:{params}")
            await asyncio.sleep(0.01)
            order.append(f"end:{params}")
            return params

        runtime = Runtime()
        runtime.register_plugin(
            _setup_plugin("work", lambda ctx: ctx.actions.register_action(ActionDefinition("work", slow)))
        )
        await runtime.initialize()
        ctx = runtime.get_context()

        results = await asyncio.gather(
            ctx.actions.run_action("work", 1),
            ctx.actions.run_action("work", 2),
        )

        assert results == [1, 2]
        assert order[:2] == ["start:1", "start:2"]
        await runtime.shutdown()


class TestInstanceIsolation:
    """Tests that two runtimes never share registrations."""

    @pytest.mark.asyncio
    async def test_same_screen_id_in_two_runtimes(self):
        """Each runtime should keep its own screen under the same id."""
        first, second = Runtime(), Runtime()
        first.register_plugin(
            _setup_plugin("ui", lambda ctx: ctx.screens.register_screen(ScreenDefinition("x", "First", "A")))
        )
        second.register_plugin(
            _setup_plugin("ui", lambda ctx: ctx.screens.register_screen(ScreenDefinition("x", "Second", "B")))
        )

        await first.initialize()
        await second.initialize()

        assert first.get_context().screens.get_screen("x").title == "First"
        assert second.get_context().screens.get_screen("x").title == "Second"

        first_screen = first.get_context().screens.get_screen("x")
        assert first_screen is not second.get_context().screens.get_screen("x")
        first_screen.title = "Renamed"
        assert second.get_context().screens.get_screen("x").title == "Second"

        await first.shutdown()
        assert second.get_context().screens.get_screen("x").title == "Second"
        await second.shutdown()

    @pytest.mark.asyncio
    async def test_actions_and_events_not_shared(self):
        first, second = Runtime(), Runtime()
        received = []
        first.register_plugin(
            _setup_plugin(
                "ping",
                lambda ctx: ctx.actions.register_action(ActionDefinition("ping", lambda p, c: "pong")),
            )
        )
        await first.initialize()
        await second.initialize()

        first.get_context().events.on("tick", received.append)
        second.get_context().events.emit("tick", "from second")

        assert received == []
        assert second.get_context().introspect.list_actions() == []

        await first.shutdown()
        await second.shutdown()


class TestDiscovery:
    """Tests for plugins discovered from the filesystem."""

    @pytest.mark.asyncio
    async def test_discovered_plugins_join_explicit_ones(self, tmp_path):
        """Discovered plugins should be ordered with explicit registrations."""
        (tmp_path / "reporter.py").write_text(
            textwrap.dedent(
                """
                from skeleton_crew.core.action_engine import ActionDefinition
                from skeleton_crew.core.plugin_base import PluginDefinition

                def setup(ctx):
                    count = len(ctx.services.get("storage"))
                    ctx.actions.register_action(ActionDefinition("report", lambda p, c: count))

                plugin = PluginDefinition(
                    name="reporter",
                    version="1.0.0",
                    setup=setup,
                    dependencies=["storage"],
                )
                """
            )
        )
        runtime = Runtime(plugin_paths=[str(tmp_path)])
        runtime.register_plugin(StoragePlugin())

        await runtime.initialize()

        ctx = runtime.get_context()
        assert ctx.plugins.get_initialized_plugins() == ["storage", "reporter"]
        assert await ctx.actions.run_action("report") == 0
        await runtime.shutdown()

    @pytest.mark.asyncio
    async def test_duplicate_discovered_plugin_skipped(self, tmp_path, caplog):
        """A discovered plugin clashing with an explicit one should be skipped."""
        (tmp_path / "dup.py").write_text(
            textwrap.dedent(
                """
                from skeleton_crew.core.plugin_base import PluginDefinition

                plugin = PluginDefinition(name="storage", version="9.9.9", setup=lambda ctx: None)
                """
            )
        )
        runtime = Runtime(plugin_paths=[str(tmp_path)])
        runtime.register_plugin(StoragePlugin())

        with caplog.at_level("ERROR", logger="CREW_Runtime"):
            await runtime.initialize()

        assert runtime.get_context().plugins.get_plugin("storage").version == "1.0.0"
        assert "Skipping discovered plugin" in caplog.text
        await runtime.shutdown()


def _setup_plugin(name, setup):
    return PluginDefinition(name=name, version="1.0.0", setup=setup)
