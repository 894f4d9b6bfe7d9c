"""Rule management service used by the API and the CLI.

Validates rule definitions at the management boundary (known trigger
event, known operators, parseable actions with their required fields)
before they reach the rule store.
"""

from __future__ import annotations

from typing import Any

import structlog

from ringrules.core.domain.actions import BaseAction, parse_action
from ringrules.core.domain.errors import NotFoundError, ValidationError
from ringrules.core.domain.event import EventCatalog
from ringrules.core.domain.rule import AutomationRule, Condition
from ringrules.core.domain.tenant import validate_tenant_id
from ringrules.core.interfaces.rule_store import RuleStoreProtocol

logger = structlog.get_logger(__name__)

_EDITABLE = ("name", "description", "trigger_event", "conditions", "actions", "enabled", "priority")
_NULLABLE = frozenset({"description"})


class RuleService:
    """CRUD over tenant rules with boundary validation."""

    def __init__(self, rule_store: RuleStoreProtocol, catalog: EventCatalog) -> None:
        self._rule_store = rule_store
        self._catalog = catalog

    def _conditions(self, raw: list[dict[str, Any]]) -> tuple[Condition, ...]:
        conditions = tuple(Condition.from_dict(c) for c in raw)
        for index, condition in enumerate(conditions):
            if not condition.field.strip():
                raise ValidationError(
                    "Condition field must not be blank", details={"condition": index}
                )
            if not condition.is_known_operator:
                raise ValidationError(
                    f"Unknown condition operator: {condition.operator}",
                    details={"condition": index, "operator": condition.operator},
                )
        return conditions

    def _actions(self, raw: list[dict[str, Any]]) -> tuple[BaseAction, ...]:
        actions = tuple(parse_action(a) for a in raw)
        for index, action in enumerate(actions):
            missing = action.missing_fields()
            if missing:
                raise ValidationError(
                    f"Action {action.action_type.value} is missing required fields: "
                    f"{', '.join(missing)}",
                    details={"action": index, "missing_fields": missing},
                )
        return actions

    def _normalize(self, changes: dict[str, Any]) -> dict[str, Any]:
        normalized = {k: v for k, v in changes.items() if k in _EDITABLE}
        nulls = sorted(k for k, v in normalized.items() if v is None and k not in _NULLABLE)
        if nulls:
            raise ValidationError(
                f"Fields must not be null: {', '.join(nulls)}",
                details={"fields": nulls},
            )
        if "name" in normalized and not str(normalized["name"] or "").strip():
            raise ValidationError("Rule name must not be blank")
        if "trigger_event" in normalized:
            self._catalog.require(normalized["trigger_event"])
        if "conditions" in normalized:
            normalized["conditions"] = self._conditions(normalized["conditions"] or [])
        if "actions" in normalized:
            normalized["actions"] = self._actions(normalized["actions"] or [])
        return normalized

    async def list_rules(self, tenant_id: str) -> list[AutomationRule]:
        return await self._rule_store.list_rules(validate_tenant_id(tenant_id))

    async def get_rule(self, tenant_id: str, rule_id: str) -> AutomationRule:
        rule = await self._rule_store.get(validate_tenant_id(tenant_id), rule_id)
        if rule is None:
            raise NotFoundError(
                f"Rule not found: {rule_id}", details={"rule_id": rule_id}
            )
        return rule

    async def create_rule(self, tenant_id: str, data: dict[str, Any]) -> AutomationRule:
        """Validate and persist a new rule.

        Args:
            tenant_id: Owning tenant.
            data: Snake-case rule fields (``name``, ``trigger_event``,
                ``conditions``, ``actions`` as wire dicts, ...).

        Raises:
            ValidationError: Malformed rule.
            CatalogError: Unknown trigger event or action type.
        """
        validate_tenant_id(tenant_id)
        if "name" not in data or "trigger_event" not in data:
            raise ValidationError("Rule requires name and trigger_event")
        fields = self._normalize(data)
        rule = AutomationRule(tenant_id=tenant_id, **fields)
        created = await self._rule_store.create(rule)
        logger.info(
            "rule_service.rule_created",
            tenant_id=tenant_id,
            rule_id=created.id,
            trigger_event=created.trigger_event,
        )
        return created

    async def update_rule(
        self, tenant_id: str, rule_id: str, changes: dict[str, Any]
    ) -> AutomationRule:
        """Apply a partial update; fields not given keep their value."""
        current = await self.get_rule(tenant_id, rule_id)
        updated = current.with_changes(**self._normalize(changes))
        return await self._rule_store.update(updated)

    async def delete_rule(self, tenant_id: str, rule_id: str) -> None:
        deleted = await self._rule_store.delete(validate_tenant_id(tenant_id), rule_id)
        if not deleted:
            raise NotFoundError(f"Rule not found: {rule_id}", details={"rule_id": rule_id})
        logger.info("rule_service.rule_deleted", tenant_id=tenant_id, rule_id=rule_id)

    def build_draft(self, tenant_id: str, data: dict[str, Any]) -> AutomationRule:
        """Validate a rule definition without storing it (for dry runs)."""
        validate_tenant_id(tenant_id)
        fields = self._normalize(data)
        fields.setdefault("name", "draft")
        if "trigger_event" not in fields:
            raise ValidationError("Rule requires trigger_event")
        return AutomationRule(tenant_id=tenant_id, **fields)
