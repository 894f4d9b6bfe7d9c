"""Action Handler Protocol.

A handler executes one action type. It receives the action with template
tokens already substituted and returns a result dict on success. Failures
are signalled by raising ``ActionValidationError`` or ``ProviderError``;
the dispatcher converts anything raised into a logged outcome, so a
handler never takes down the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ringrules.core.domain.actions import BaseAction
    from ringrules.core.domain.event import Event


@dataclass(frozen=True)
class ActionContext:
    """What a handler knows about the firing it belongs to."""

    tenant_id: str
    rule_id: str
    rule_name: str
    event: Event

    @property
    def payload(self) -> dict[str, Any]:
        return self.event.payload


class ActionHandlerProtocol(Protocol):
    """Protocol for executing one action type.

    Handlers should be idempotent enough for an external retry layer to
    call them again after a failure.
    """

    async def execute(self, action: BaseAction, context: ActionContext) -> dict[str, Any]:
        """Run the action and return handler-specific result data."""
        ...
