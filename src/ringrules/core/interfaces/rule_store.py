"""Rule Store Protocol for tenant-scoped rule persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ringrules.core.domain.rule import AutomationRule


class RuleStoreProtocol(Protocol):
    """Protocol for persisting automation rules.

    Every operation is scoped to one tenant. Implementations raise
    ``PersistenceError`` when the backing store is unavailable.
    """

    async def create(self, rule: AutomationRule) -> AutomationRule:
        """Persist a new rule and return it."""
        ...

    async def get(self, tenant_id: str, rule_id: str) -> AutomationRule | None:
        """Retrieve a rule, or None if the tenant has no such rule."""
        ...

    async def update(self, rule: AutomationRule) -> AutomationRule:
        """Replace an existing rule (last write wins).

        Raises:
            NotFoundError: The tenant has no rule with ``rule.id``.
        """
        ...

    async def delete(self, tenant_id: str, rule_id: str) -> bool:
        """Delete a rule. Returns True if it existed."""
        ...

    async def list_rules(self, tenant_id: str) -> list[AutomationRule]:
        """All rules of a tenant, highest priority first."""
        ...

    async def find_enabled(self, tenant_id: str, trigger_event: str) -> list[AutomationRule]:
        """Enabled rules of a tenant listening on ``trigger_event``."""
        ...

    async def list_tenants(self) -> list[str]:
        """Tenants that own at least one rule."""
        ...
