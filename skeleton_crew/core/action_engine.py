# CREW_FEAT: action-engine-001
"""
Skeleton Crew - Action Engine
=============================

Named, independently invocable units of work.

Features:
- O(1) lookup by action id
- Optional per-action deadline (milliseconds)
- Structured failures: not found, execution failure, timeout
- Handlers receive the runtime context and may call other actions

A timed-out handler is abandoned, not cancelled: the caller stops waiting and
the handler's eventual result is discarded.

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import asyncio
import difflib
import inspect
import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from .exceptions import (
    ActionExecutionError,
    ActionNotFoundError,
    ActionTimeoutError,
    DuplicateRegistrationError,
    NotInitializedError,
    ValidationError,
)

ActionHandler = Callable[[Any, Any], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class ActionDefinition:
    """
    Action definition.

    Example:
        async def add(params, context):
            return params["a"] + params["b"]

        ActionDefinition(id="math:add", handler=add, timeout_ms=500)
    """

    id: str
    handler: ActionHandler
    timeout_ms: Optional[float] = None


class ActionEngine:
    """
    Action registry and executor for one runtime instance.

    Example:
        engine = ActionEngine()
        engine.set_context(context)

        unregister = engine.register_action(ActionDefinition("ping", lambda p, ctx: "pong"))
        assert await engine.run_action("ping") == "pong"
        unregister()
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("CREW_ActionEngine")
        self._actions: Dict[str, ActionDefinition] = {}
        self._context: Any = None
        # Handlers that lost the race against their deadline
        self._abandoned: Set[asyncio.Future] = set()
        self._stats = {
            "invocations": 0,
            "failures": 0,
            "timeouts": 0,
        }

    def set_context(self, context: Any) -> None:
        """Set the context passed to every handler."""
        self._context = context

    def register_action(self, action: ActionDefinition) -> Callable[[], None]:
        """
        Register an action.

        Duplicate ids are rejected; unregister first to replace a handler.

        Returns:
            Idempotent unregister function
        """
        if not isinstance(action.id, str) or not action.id:
            raise ValidationError("Action", "id")
        if not callable(action.handler):
            raise ValidationError("Action", "handler", action.id)
        if action.timeout_ms is not None and (
            isinstance(action.timeout_ms, bool)
            or not isinstance(action.timeout_ms, Real)
            or action.timeout_ms <= 0
        ):
            raise ValidationError("Action", "timeout_ms", action.id)

        if action.id in self._actions:
            raise DuplicateRegistrationError("Action", action.id)

        self._actions[action.id] = action
        self._logger.debug(f'Action "{action.id}" registered')

        def unregister() -> None:
            # Only remove the definition this handle registered
            if self._actions.get(action.id) is action:
                del self._actions[action.id]
                self._logger.debug(f'Action "{action.id}" unregistered')

        return unregister

    async def run_action(self, action_id: str, params: Any = None) -> Any:
        """
        Execute an action.

        Args:
            action_id: Registered action id
            params: Payload passed to the handler

        Returns:
            Handler result

        Raises:
            ActionNotFoundError: No action registered under ``action_id``
            ActionTimeoutError: Deadline elapsed before the handler finished
            ActionExecutionError: Handler raised (original error as ``cause``)
        """
        action = self._actions.get(action_id)
        if action is None:
            raise ActionNotFoundError(action_id, self._suggest(action_id))

        if self._context is None:
            raise NotInitializedError("RuntimeContext not set in ActionEngine")

        self._stats["invocations"] += 1

        try:
            result = action.handler(params, self._context)
        except Exception as e:
            raise self._execution_error(action_id, e) from e

        if not inspect.isawaitable(result):
            return result

        if action.timeout_ms is not None:
            return await self._run_with_timeout(action, result)

        try:
            return await result
        except Exception as e:
            raise self._execution_error(action_id, e) from e

    async def _run_with_timeout(self, action: ActionDefinition, pending: Awaitable) -> Any:
        """Race the handler against its deadline."""
        task = asyncio.ensure_future(pending)

        try:
            # asyncio.wait cancels its own timer when the task wins
            done, _ = await asyncio.wait({task}, timeout=action.timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            self._abandon(action.id, task)
            self._stats["timeouts"] += 1
            self._logger.error(f'Action "{action.id}" timed out after {action.timeout_ms:g}ms')
            raise ActionTimeoutError(action.id, action.timeout_ms)

        try:
            return task.result()
        except Exception as e:
            raise self._execution_error(action.id, e) from e

    def _abandon(self, action_id: str, task: asyncio.Future) -> None:
        self._abandoned.add(task)

        def _discard(fut: asyncio.Future) -> None:
            self._abandoned.discard(fut)
            if not fut.cancelled() and fut.exception() is not None:
                self._logger.debug(
                    f'Abandoned action "{action_id}" finished with error: {fut.exception()!r}'
                )

        task.add_done_callback(_discard)

    def _execution_error(self, action_id: str, error: Exception) -> ActionExecutionError:
        self._stats["failures"] += 1
        self._logger.error(f'Action "{action_id}" execution failed: {error!r}')
        return ActionExecutionError(action_id, error)

    def _suggest(self, action_id: str) -> List[str]:
        if not isinstance(action_id, str):
            return []
        return difflib.get_close_matches(action_id, list(self._actions), n=3, cutoff=0.6)

    def get_action(self, action_id: str) -> Optional[ActionDefinition]:
        """Get an action definition by id."""
        return self._actions.get(action_id)

    def get_all_actions(self) -> List[ActionDefinition]:
        """Get all action definitions in registration order."""
        return list(self._actions.values())

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            **self._stats,
            "registered": len(self._actions),
            "abandoned_in_flight": len(self._abandoned),
        }

    def clear(self) -> None:
        """Drop every action. Used during shutdown."""
        self._actions.clear()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "ActionHandler",
    "ActionDefinition",
    "ActionEngine",
]
