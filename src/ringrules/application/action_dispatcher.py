"""Action dispatcher executing a matched rule's actions.

For each action of a rule, in listed order:
  1. Substitute ``{{field}}`` tokens from the event payload
  2. Check required fields -> ``VALIDATION`` outcome when blank
  3. Resolve the handler from the ActionRegistry
  4. Run it under a timeout -> ``TIMEOUT`` outcome when exceeded
  5. Convert anything raised into a ``PROVIDER`` outcome

Execution is best-effort: a failed action never stops the ones after it,
and nothing raised by a handler leaves ``dispatch``.
"""

from __future__ import annotations

import asyncio

import structlog

from ringrules.application.action_registry import ActionRegistry
from ringrules.application.templating import render_action
from ringrules.core.domain.actions import BaseAction
from ringrules.core.domain.errors import ActionValidationError, CatalogError, ProviderError
from ringrules.core.domain.event import Event
from ringrules.core.domain.execution import ActionOutcome, FailureReason
from ringrules.core.domain.rule import AutomationRule
from ringrules.core.interfaces.action_handler import ActionContext

logger = structlog.get_logger(__name__)

DEFAULT_ACTION_TIMEOUT_SECONDS = 5.0


class ActionDispatcher:
    """Runs a rule's actions sequentially against registered handlers."""

    def __init__(
        self,
        registry: ActionRegistry,
        action_timeout: float = DEFAULT_ACTION_TIMEOUT_SECONDS,
    ) -> None:
        self._registry = registry
        self._action_timeout = action_timeout
        self._action_count = 0

    @property
    def action_count(self) -> int:
        """Number of actions attempted since startup."""
        return self._action_count

    async def dispatch(self, rule: AutomationRule, event: Event) -> list[ActionOutcome]:
        """Execute every action of ``rule`` for ``event``.

        Returns:
            One outcome per action, in the rule's action order.
        """
        context = ActionContext(
            tenant_id=rule.tenant_id,
            rule_id=rule.id,
            rule_name=rule.name,
            event=event,
        )
        outcomes: list[ActionOutcome] = []
        for index, action in enumerate(rule.actions):
            self._action_count += 1
            outcome = await self._dispatch_action(action, context)
            outcomes.append(outcome)
            log = logger.info if outcome.success else logger.warning
            log(
                "action_dispatcher.action_succeeded"
                if outcome.success
                else "action_dispatcher.action_failed",
                tenant_id=rule.tenant_id,
                rule_id=rule.id,
                event_id=event.event_id,
                index=index,
                action_type=outcome.action_type,
                failure=outcome.failure.value if outcome.failure else None,
                error=outcome.error,
            )
        return outcomes

    async def _dispatch_action(self, action: BaseAction, context: ActionContext) -> ActionOutcome:
        """Dispatch a single action and capture its outcome."""
        action_type = action.action_type.value
        try:
            rendered = render_action(action, context.payload)
        except Exception as exc:
            return ActionOutcome.failed(action_type, FailureReason.VALIDATION, str(exc))

        missing = rendered.missing_fields()
        if missing:
            return ActionOutcome.failed(
                action_type,
                FailureReason.VALIDATION,
                f"Missing required fields: {', '.join(missing)}",
            )

        try:
            handler = self._registry.resolve(action.action_type)
        except CatalogError as exc:
            return ActionOutcome.failed(action_type, FailureReason.UNKNOWN_ACTION, exc.message)

        try:
            result = await asyncio.wait_for(
                handler.execute(rendered, context), timeout=self._action_timeout
            )
        except asyncio.TimeoutError:
            return ActionOutcome.failed(
                action_type,
                FailureReason.TIMEOUT,
                f"Timed out after {self._action_timeout:g}s",
            )
        except ActionValidationError as exc:
            return ActionOutcome.failed(action_type, FailureReason.VALIDATION, exc.message)
        except ProviderError as exc:
            return ActionOutcome.failed(action_type, FailureReason.PROVIDER, exc.message)
        except Exception as exc:
            logger.error(
                "action_dispatcher.handler_crashed",
                action_type=action_type,
                rule_id=context.rule_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ActionOutcome.failed(action_type, FailureReason.PROVIDER, str(exc))

        return ActionOutcome.ok(action_type, result if isinstance(result, dict) else {})
