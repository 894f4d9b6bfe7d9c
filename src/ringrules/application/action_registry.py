"""Action registry mapping action types to their handlers.

The registry is the single table of supported actions. It is injected into
the dispatcher and the management API, so adding an action type means one
new variant in ``core.domain.actions`` and one ``register`` call.
"""

from __future__ import annotations

from typing import Any

import structlog

from ringrules.core.domain.actions import ACTION_CLASSES, ActionType
from ringrules.core.domain.errors import CatalogError
from ringrules.core.interfaces.action_handler import ActionHandlerProtocol

logger = structlog.get_logger(__name__)


class ActionRegistry:
    """Holds one handler per action type."""

    def __init__(self) -> None:
        self._handlers: dict[ActionType, ActionHandlerProtocol] = {}

    def register(self, action_type: ActionType, handler: ActionHandlerProtocol) -> None:
        """Register (or replace) the handler for ``action_type``."""
        if action_type in self._handlers:
            logger.debug("action_registry.handler_replaced", action_type=action_type.value)
        self._handlers[action_type] = handler

    def resolve(self, action_type: str | ActionType) -> ActionHandlerProtocol:
        """Return the handler for ``action_type``.

        Raises:
            CatalogError: Unknown action type or no handler registered.
        """
        try:
            key = ActionType(action_type)
        except ValueError as exc:
            raise CatalogError(
                f"Unknown action type: {action_type}", kind="action", identifier=str(action_type)
            ) from exc
        handler = self._handlers.get(key)
        if handler is None:
            raise CatalogError(
                f"No handler registered for action type: {key.value}",
                kind="action",
                identifier=key.value,
            )
        return handler

    def registered_types(self) -> list[ActionType]:
        return [t for t in ActionType if t in self._handlers]

    def entries(self) -> list[dict[str, Any]]:
        """Describe every action type for the management UI."""
        return [
            {
                "type": action_type.value,
                "label": cls.label,
                "requiredFields": cls.required_fields(),
                "available": action_type in self._handlers,
            }
            for action_type, cls in ACTION_CLASSES.items()
        ]
