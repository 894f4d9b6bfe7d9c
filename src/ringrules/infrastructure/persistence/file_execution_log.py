"""File-based execution log appending JSON lines per tenant."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import aiofiles
import structlog

from ringrules.core.domain.errors import PersistenceError
from ringrules.core.domain.event import Event
from ringrules.core.domain.execution import ExecutionLogEntry, ExecutionStatus
from ringrules.core.domain.rule import AutomationRule
from ringrules.core.domain.tenant import validate_tenant_id

logger = structlog.get_logger(__name__)


class FileExecutionLog:
    """Append-only execution log.

    Storage layout::

        {work_dir}/tenants/{tenant_id}/execution_log.jsonl

    One JSON object per line, oldest first. Entries are never rewritten;
    retention is handled outside this package.
    """

    def __init__(self, work_dir: str = ".ringrules") -> None:
        self._root = Path(work_dir) / "tenants"
        self._locks: dict[str, asyncio.Lock] = {}

    def _path(self, tenant_id: str) -> Path:
        return self._root / validate_tenant_id(tenant_id) / "execution_log.jsonl"

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
        """Append one entry for a rule firing."""
        entry = ExecutionLogEntry(
            tenant_id=tenant_id,
            rule_id=rule.id,
            rule_name=rule.name,
            trigger_event=event.type if event else rule.trigger_event,
            status=status,
            error=error,
            event_id=event.event_id if event else None,
            results=list(results or []),
        )
        path = self._path(tenant_id)
        line = json.dumps(entry.to_dict(), default=str) + "\n"
        async with self._locks.setdefault(tenant_id, asyncio.Lock()):
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(path, "a") as f:
                    await f.write(line)
            except OSError as exc:
                raise PersistenceError(
                    f"Could not append execution log for tenant {tenant_id}",
                    details={"tenant_id": tenant_id, "error": str(exc)},
                ) from exc
        logger.debug(
            "execution_log.recorded",
            tenant_id=tenant_id,
            rule_id=rule.id,
            status=status.value,
        )
        return entry

    async def _read_all(self, tenant_id: str) -> list[ExecutionLogEntry]:
        path = self._path(tenant_id)
        if not path.exists():
            return []
        try:
            async with aiofiles.open(path) as f:
                raw = await f.read()
        except OSError as exc:
            raise PersistenceError(
                f"Could not read execution log for tenant {tenant_id}",
                details={"tenant_id": tenant_id, "error": str(exc)},
            ) from exc
        entries: list[ExecutionLogEntry] = []
        for number, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                entries.append(ExecutionLogEntry.from_dict(json.loads(line)))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning(
                    "execution_log.corrupt_line",
                    tenant_id=tenant_id,
                    line=number,
                    error=str(exc),
                )
        return entries

    async def list_entries(
        self,
        tenant_id: str,
        *,
        limit: int = 100,
        offset: int = 0,
        status: ExecutionStatus | None = None,
        rule_id: str | None = None,
    ) -> tuple[list[ExecutionLogEntry], int]:
        """Return a page of entries, newest first, and the filtered total."""
        entries = await self._read_all(tenant_id)
        if status is not None:
            entries = [e for e in entries if e.status == status]
        if rule_id:
            entries = [e for e in entries if e.rule_id == rule_id]
        entries.reverse()
        return entries[offset : offset + limit], len(entries)
