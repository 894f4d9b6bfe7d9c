"""File-based rule store persisting each tenant's rules as one JSON document."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import aiofiles
import structlog

from ringrules.core.domain.errors import NotFoundError, PersistenceError, RingrulesError
from ringrules.core.domain.rule import AutomationRule
from ringrules.core.domain.tenant import validate_tenant_id

logger = structlog.get_logger(__name__)


class FileRuleStore:
    """Persist automation rules per tenant.

    Storage layout::

        {work_dir}/tenants/
        ├── {tenant_id}/rules.json
        └── {tenant_id}/rules.json

    Each tenant's rules are loaded lazily into memory on first access and
    written back atomically (tmp file + rename) on every change. Writes for
    one tenant are serialized by a per-tenant lock; tenants never share a
    file or a lock.
    """

    def __init__(self, work_dir: str = ".ringrules") -> None:
        self._root = Path(work_dir) / "tenants"
        self._rules: dict[str, dict[str, AutomationRule]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._corrupt: dict[str, list[Any]] = {}

    def _path(self, tenant_id: str) -> Path:
        return self._root / validate_tenant_id(tenant_id) / "rules.json"

    def _lock(self, tenant_id: str) -> asyncio.Lock:
        return self._locks.setdefault(tenant_id, asyncio.Lock())

    async def _load(self, tenant_id: str) -> dict[str, AutomationRule]:
        """Return the tenant's rule map, reading it from disk the first time."""
        cached = self._rules.get(tenant_id)
        if cached is not None:
            return cached
        path = self._path(tenant_id)
        rules: dict[str, AutomationRule] = {}
        corrupt: list[Any] = []
        if path.exists():
            try:
                async with aiofiles.open(path) as f:
                    raw = await f.read()
                items = json.loads(raw)
                if not isinstance(items, list):
                    raise ValueError("rules document is not a JSON array")
            except (OSError, ValueError) as exc:
                logger.error("rule_store.load_failed", tenant_id=tenant_id, error=str(exc))
                raise PersistenceError(
                    f"Could not load rules for tenant {tenant_id}",
                    details={"tenant_id": tenant_id, "error": str(exc)},
                ) from exc
            for index, item in enumerate(items):
                try:
                    rule = AutomationRule.from_dict(item)
                except (RingrulesError, AttributeError, KeyError, TypeError, ValueError) as exc:
                    logger.warning(
                        "rule_store.corrupt_rule",
                        tenant_id=tenant_id,
                        index=index,
                        error=str(exc),
                    )
                    corrupt.append(item)
                    continue
                rules[rule.id] = rule
            logger.debug(
                "rule_store.loaded", tenant_id=tenant_id, count=len(rules), corrupt=len(corrupt)
            )
        # Unparseable records are written back untouched on the next save.
        self._corrupt[tenant_id] = corrupt
        self._rules[tenant_id] = rules
        return rules

    async def _persist(self, tenant_id: str, rules: dict[str, AutomationRule]) -> None:
        path = self._path(tenant_id)
        records = [r.to_dict() for r in rules.values()] + self._corrupt.get(tenant_id, [])
        data = json.dumps(records, indent=2, default=str)
        tmp = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp, "w") as f:
                await f.write(data)
            tmp.replace(path)
        except OSError as exc:
            logger.error("rule_store.persist_failed", tenant_id=tenant_id, error=str(exc))
            raise PersistenceError(
                f"Could not save rules for tenant {tenant_id}",
                details={"tenant_id": tenant_id, "error": str(exc)},
            ) from exc

    async def create(self, rule: AutomationRule) -> AutomationRule:
        """Persist a new rule."""
        async with self._lock(rule.tenant_id):
            rules = dict(await self._load(rule.tenant_id))
            rules[rule.id] = rule
            await self._persist(rule.tenant_id, rules)
            self._rules[rule.tenant_id] = rules
        logger.info("rule_store.rule_created", tenant_id=rule.tenant_id, rule_id=rule.id)
        return rule

    async def get(self, tenant_id: str, rule_id: str) -> AutomationRule | None:
        rules = await self._load(tenant_id)
        return rules.get(rule_id)

    async def update(self, rule: AutomationRule) -> AutomationRule:
        """Replace an existing rule; last write wins."""
        async with self._lock(rule.tenant_id):
            rules = dict(await self._load(rule.tenant_id))
            if rule.id not in rules:
                raise NotFoundError(
                    f"Rule not found: {rule.id}",
                    details={"tenant_id": rule.tenant_id, "rule_id": rule.id},
                )
            rules[rule.id] = rule
            await self._persist(rule.tenant_id, rules)
            self._rules[rule.tenant_id] = rules
        logger.info("rule_store.rule_updated", tenant_id=rule.tenant_id, rule_id=rule.id)
        return rule

    async def delete(self, tenant_id: str, rule_id: str) -> bool:
        async with self._lock(tenant_id):
            rules = dict(await self._load(tenant_id))
            if rule_id not in rules:
                return False
            del rules[rule_id]
            await self._persist(tenant_id, rules)
            self._rules[tenant_id] = rules
        logger.info("rule_store.rule_deleted", tenant_id=tenant_id, rule_id=rule_id)
        return True

    async def list_rules(self, tenant_id: str) -> list[AutomationRule]:
        """All rules of a tenant in dispatch order."""
        rules = await self._load(tenant_id)
        return sorted(rules.values(), key=AutomationRule.sort_key)

    async def find_enabled(self, tenant_id: str, trigger_event: str) -> list[AutomationRule]:
        rules = await self._load(tenant_id)
        return [r for r in rules.values() if r.enabled and r.trigger_event == trigger_event]

    async def list_tenants(self) -> list[str]:
        """Tenants with a rules file on disk or rules in memory."""
        tenants = {t for t, rules in self._rules.items() if rules}
        if self._root.exists():
            tenants.update(p.parent.name for p in self._root.glob("*/rules.json"))
        return sorted(tenants)
