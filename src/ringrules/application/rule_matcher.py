"""Rule matcher selecting which rules fire for an event.

Looks up the tenant's enabled rules for the event type, filters them with
the condition evaluator and orders the survivors for dispatch.
"""

from __future__ import annotations

import structlog

from ringrules.application.condition_evaluator import evaluate
from ringrules.core.domain.event import Event
from ringrules.core.domain.rule import AutomationRule
from ringrules.core.interfaces.rule_store import RuleStoreProtocol

logger = structlog.get_logger(__name__)


class RuleMatcher:
    """Matches events against a tenant's automation rules.

    Ordering is deterministic: priority descending, then ``created_at``
    ascending (oldest rule first), then rule id.
    """

    def __init__(self, rule_store: RuleStoreProtocol) -> None:
        self._rule_store = rule_store

    async def match(self, tenant_id: str, event: Event) -> list[AutomationRule]:
        """Return the rules that should fire for ``event``, in dispatch order.

        An empty list is the normal "nothing to do" answer. Store failures
        propagate to the caller.
        """
        candidates = await self._rule_store.find_enabled(tenant_id, event.type)
        if not candidates:
            return []

        matched: list[AutomationRule] = []
        for rule in candidates:
            if rule.tenant_id != tenant_id or not rule.is_active:
                continue
            if evaluate(rule.conditions, event.payload):
                matched.append(rule)

        matched.sort(key=AutomationRule.sort_key)

        if matched:
            logger.info(
                "rule_matcher.matched",
                tenant_id=tenant_id,
                event_id=event.event_id,
                event_type=event.type,
                rule_ids=[r.id for r in matched],
            )
        return matched
