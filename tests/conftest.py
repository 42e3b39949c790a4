"""
Skeleton Crew Test Configuration
================================

Pytest fixtures and helpers shared by unit and integration tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from skeleton_crew.core.action_engine import ActionEngine
from skeleton_crew.core.event_bus import EventBus
from skeleton_crew.core.orchestrator import Runtime
from skeleton_crew.core.plugin_base import PluginDefinition
from skeleton_crew.core.plugin_registry import PluginRegistry


def make_plugin(
    name: str,
    calls: List[str],
    dependencies: Optional[List[str]] = None,
    fail_setup: bool = False,
    fail_dispose: bool = False,
    on_setup=None,
    **kwargs: Any,
) -> PluginDefinition:
    """Build a plugin that records "setup:<name>" and "dispose:<name>" into ``calls``."""

    async def setup(ctx):
        calls.append(f"setup:{name}")
        if on_setup is not None:
            on_setup(ctx)
        if fail_setup:
            raise RuntimeError(f"{name} setup boom")

    async def dispose(ctx):
        calls.append(f"dispose:{name}")
        if fail_dispose:
            raise RuntimeError(f"{name} dispose boom")

    return PluginDefinition(
        name=name,
        version="1.0.0",
        setup=setup,
        dispose=dispose,
        dependencies=dependencies or [],
        **kwargs,
    )


class FakeContext:
    """Minimal stand-in for a runtime context in subsystem tests."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}


@pytest.fixture
def calls() -> List[str]:
    """Shared call log for recording plugins."""
    return []


@pytest.fixture
def event_bus():
    """Create an event bus for testing."""
    return EventBus()


@pytest.fixture
def registry():
    """Create a plugin registry for testing."""
    return PluginRegistry()


@pytest.fixture
def fake_context():
    return FakeContext()


@pytest.fixture
def engine(fake_context):
    """Create an action engine with a context attached."""
    action_engine = ActionEngine()
    action_engine.set_context(fake_context)
    return action_engine


@pytest.fixture
def runtime():
    """Create an uninitialized runtime."""
    return Runtime()


@pytest.fixture
def plugin_factory():
    """Factory for recording plugins (see ``make_plugin``)."""
    return make_plugin
