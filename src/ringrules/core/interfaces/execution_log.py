"""Execution Log Protocol for the append-only automation audit trail."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ringrules.core.domain.event import Event
    from ringrules.core.domain.execution import ExecutionLogEntry, ExecutionStatus
    from ringrules.core.domain.rule import AutomationRule


class ExecutionLogProtocol(Protocol):
    """Protocol for recording and reading rule firings.

    The log is written once per (rule, event) and never read back by the
    matching pipeline.
    """

    async def record(
        self,
        tenant_id: str,
        rule: AutomationRule,
        status: ExecutionStatus,
        error: str | None = None,
        *,
        event: Event | None = None,
        results: list[dict[str, Any]] | None = None,
    ) -> ExecutionLogEntry:
        """Append an entry and return it."""
        ...

    async def list_entries(
        self,
        tenant_id: str,
        *,
        limit: int = 100,
        offset: int = 0,
        status: ExecutionStatus | None = None,
        rule_id: str | None = None,
    ) -> tuple[list[ExecutionLogEntry], int]:
        """Return a page of entries (newest first) and the filtered total."""
        ...
