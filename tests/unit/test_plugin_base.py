"""
Tests for Skeleton Crew Plugin Base
===================================

Tests plugin definitions and class-based plugins.
"""

import dataclasses

import pytest

from skeleton_crew.core.plugin_base import (
    ConfigValidationResult,
    Plugin,
    PluginDefinition,
    as_definition,
    maybe_await,
)


class SamplePlugin(Plugin):
    """Sample plugin implementation for testing."""

    name = "sample"
    version = "2.1.0"
    dependencies = ["storage"]
    config_keys = ["sample.enabled"]

    def __init__(self):
        super().__init__()
        self.setup_calls = 0

    async def setup(self, context):
        self.setup_calls += 1


class DisposingPlugin(SamplePlugin):
    name = "disposing"
    dependencies = []

    async def dispose(self, context):
        pass

    def validate_config(self, config):
        return ConfigValidationResult(valid="sample" in config)


class TestPluginDefinition:
    """Tests for plugin definitions."""

    def test_lists_become_tuples(self):
        """Dependencies and config keys should be stored immutably."""
        definition = PluginDefinition(
            name="a", version="1.0.0", setup=lambda ctx: None, dependencies=["b", "c"]
        )

        assert definition.dependencies == ("b", "c")
        assert definition.config_keys == ()

    def test_frozen(self):
        """Definitions should not be mutable after creation."""
        definition = PluginDefinition(name="a", version="1.0.0", setup=lambda ctx: None)

        with pytest.raises(dataclasses.FrozenInstanceError):
            definition.name = "b"

    def test_to_dict(self):
        """Should convert metadata to a dict without callables."""
        definition = PluginDefinition(
            name="a", version="1.0.0", setup=lambda ctx: None, dependencies=["b"]
        )

        assert definition.to_dict() == {
            "name": "a",
            "version": "1.0.0",
            "dependencies": ["b"],
            "config_keys": [],
            "has_dispose": False,
            "has_config_validation": False,
        }


class TestPluginClass:
    """Tests for class-based plugins."""

    def test_to_definition(self):
        """Should convert class attributes into a definition."""
        plugin = SamplePlugin()
        definition = plugin.to_definition()

        assert definition.name == "sample"
        assert definition.version == "2.1.0"
        assert definition.dependencies == ("storage",)
        assert definition.config_keys == ("sample.enabled",)

    def test_default_identity_is_immutable(self):
        """Subclasses that omit dependencies should get an empty tuple, not a shared list."""

        class Bare(Plugin):
            name = "bare"

            async def setup(self, context):
                pass

        assert Bare.dependencies == ()
        assert Bare.config_keys == ()
        assert Bare().to_definition().dependencies == ()

    def test_default_hooks_are_omitted(self):
        """Non-overridden dispose and validate_config should not be exposed."""
        definition = SamplePlugin().to_definition()

        assert definition.dispose is None
        assert definition.validate_config is None

    def test_overridden_hooks_are_exposed(self):
        """Overridden dispose and validate_config should be carried over."""
        definition = DisposingPlugin().to_definition()

        assert definition.dispose is not None
        assert definition.validate_config({"sample": 1}).valid is True

    @pytest.mark.asyncio
    async def test_setup_bound_to_instance(self):
        """The definition's setup should call the instance method."""
        plugin = SamplePlugin()

        await plugin.to_definition().setup(None)

        assert plugin.setup_calls == 1

    def test_as_definition(self):
        """Should accept both definitions and plugin instances."""
        definition = PluginDefinition(name="a", version="1.0.0", setup=lambda ctx: None)

        assert as_definition(definition) is definition
        assert as_definition(SamplePlugin()).name == "sample"

    def test_abstract_setup_required(self):
        """A plugin without setup cannot be instantiated."""

        class Incomplete(Plugin):
            name = "incomplete"

        with pytest.raises(TypeError):
            Incomplete()

    def test_repr(self):
        assert repr(SamplePlugin()) == "<SamplePlugin sample v2.1.0>"


class TestMaybeAwait:
    """Tests for the sync/async bridge."""

    @pytest.mark.asyncio
    async def test_plain_value(self):
        assert await maybe_await(5) == 5

    @pytest.mark.asyncio
    async def test_coroutine(self):
        async def value():
            return "awaited"

        assert await maybe_await(value()) == "awaited"
