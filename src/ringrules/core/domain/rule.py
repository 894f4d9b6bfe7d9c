"""Automation rule domain models.

Defines the "when event X, if conditions hold, do actions" records that
tenants configure through the management API. Rules are evaluated by the
RuleMatcher when an Event is processed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from ringrules.core.domain.actions import BaseAction, parse_action
from ringrules.core.domain.errors import ValidationError
from ringrules.core.utils.time import parse_timestamp, utc_now

MIN_PRIORITY = 0
MAX_PRIORITY = 100


class ConditionOperator(str, Enum):
    """Operators a condition may use."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    EXISTS = "exists"
    IN = "in"


@dataclass(frozen=True)
class Condition:
    """A single field/operator/value test against an event payload.

    ``operator`` is kept as the raw string so that rules stored with an
    operator this version does not know still load; the evaluator treats
    those as anomalies.

    Attributes:
        field: Dot path into the event payload (``"lead.phone"``).
        operator: One of ``ConditionOperator`` values.
        value: Comparison operand; ignored by ``exists``.
    """

    field: str
    operator: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {"field": self.field, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        """Deserialize from stored dict."""
        if not isinstance(data, dict):
            raise ValidationError("Condition must be an object")
        return cls(
            field=data.get("field", ""),
            operator=str(data.get("operator", "")),
            value=data.get("value"),
        )

    @property
    def is_known_operator(self) -> bool:
        return self.operator in {op.value for op in ConditionOperator}


@dataclass(frozen=True)
class AutomationRule:
    """A tenant-owned rule binding a trigger event to conditions and actions.

    Attributes:
        id: Unique identifier for this rule.
        tenant_id: Owning tenant; rules are never shared across tenants.
        name: Human-readable rule name.
        description: What this rule does, for documentation.
        trigger_event: Event catalog identifier the rule listens on.
        conditions: AND-combined conditions; empty means always match.
        actions: Ordered actions; a rule without actions is never active.
        enabled: Whether the rule participates in matching.
        priority: 0-100, higher fires first.
        created_at: Creation time; breaks priority ties (oldest first).
        updated_at: Last modification time.
    """

    tenant_id: str
    name: str
    trigger_event: str
    conditions: tuple[Condition, ...] = ()
    actions: tuple[BaseAction, ...] = ()
    description: str | None = None
    enabled: bool = True
    priority: int = 0
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValidationError(
                "Enabled must be a boolean", details={"enabled": self.enabled}
            )
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ValidationError(
                "Priority must be an integer", details={"priority": self.priority}
            )
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise ValidationError(
                f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}",
                details={"priority": self.priority},
            )

    @property
    def is_active(self) -> bool:
        """Enabled and carrying at least one action."""
        return self.enabled and bool(self.actions)

    def sort_key(self) -> tuple[int, datetime, str]:
        """Priority descending, then oldest first, then id."""
        return (-self.priority, self.created_at, self.id)

    def with_changes(self, **changes: Any) -> AutomationRule:
        """Return a copy with ``changes`` applied and ``updated_at`` refreshed."""
        changes.setdefault("updated_at", utc_now())
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage and the management API."""
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "triggerEvent": self.trigger_event,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
            "enabled": self.enabled,
            "priority": self.priority,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutomationRule:
        """Deserialize from stored dict."""
        return cls(
            id=str(data.get("id") or uuid4().hex),
            tenant_id=str(data.get("tenantId", "")),
            name=str(data.get("name", "")),
            description=data.get("description"),
            trigger_event=str(data.get("triggerEvent", "")),
            conditions=tuple(Condition.from_dict(c) for c in data.get("conditions") or []),
            actions=tuple(parse_action(a) for a in data.get("actions") or []),
            enabled=bool(data.get("enabled", True)),
            priority=int(data.get("priority", 0)),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )
