"""In-memory implementation of every integration protocol.

Records each outbound call instead of contacting a provider. Used by the
development server and by tests that assert on what a rule did.
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog

from ringrules.core.utils.time import utc_now

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OutboxRecord:
    """One recorded outbound call."""

    channel: str
    tenant_id: str
    data: dict[str, Any]
    recorded_at: datetime = field(default_factory=utc_now)


class InMemoryOutbox:
    """Implements the SMS, email, lead, task, CRM, notification and sequence protocols."""

    def __init__(self, agents: list[str] | None = None) -> None:
        self.records: list[OutboxRecord] = []
        self._agents = list(agents or [])
        self._rotation = itertools.cycle(self._agents) if self._agents else None
        self._assignments: dict[str, str] = {}

    def _record(self, channel: str, tenant_id: str, **data: Any) -> None:
        self.records.append(OutboxRecord(channel=channel, tenant_id=tenant_id, data=data))
        logger.info("outbox.recorded", channel=channel, tenant_id=tenant_id)

    def by_channel(self, channel: str) -> list[OutboxRecord]:
        return [r for r in self.records if r.channel == channel]

    def clear(self) -> None:
        self.records.clear()

    async def send_sms(self, tenant_id: str, to: str, body: str) -> dict[str, Any]:
        message_id = f"SM{uuid.uuid4().hex[:16]}"
        self._record("sms", tenant_id, to=to, body=body, message_id=message_id)
        return {"messageId": message_id, "status": "queued"}

    async def send_email(
        self, tenant_id: str, to: str, subject: str, html: str
    ) -> dict[str, Any]:
        message_id = uuid.uuid4().hex
        self._record("email", tenant_id, to=to, subject=subject, html=html, message_id=message_id)
        return {"messageId": message_id, "status": "queued"}

    async def update_lead(self, tenant_id: str, lead_id: str, updates: dict[str, Any]) -> None:
        self._record("lead_update", tenant_id, lead_id=lead_id, updates=dict(updates))

    async def assign_lead(
        self, tenant_id: str, lead_id: str, strategy: str, agent_id: str | None = None
    ) -> str | None:
        if strategy == "specific":
            chosen = agent_id
        elif strategy == "leastBusy" and self._agents:
            load = {a: 0 for a in self._agents}
            for assigned in self._assignments.values():
                if assigned in load:
                    load[assigned] += 1
            chosen = min(self._agents, key=lambda a: load[a])
        else:
            chosen = next(self._rotation) if self._rotation else None
        if chosen is not None:
            self._assignments[lead_id] = chosen
        self._record("lead_assign", tenant_id, lead_id=lead_id, strategy=strategy, agent_id=chosen)
        return chosen

    async def create_task(
        self,
        tenant_id: str,
        *,
        title: str,
        description: str,
        due_at: datetime | None,
        assigned_to_id: str | None,
        related_lead_id: str | None,
        priority: str,
    ) -> str:
        task_id = uuid.uuid4().hex
        self._record(
            "task",
            tenant_id,
            task_id=task_id,
            title=title,
            description=description,
            due_at=due_at.isoformat() if due_at else None,
            assigned_to_id=assigned_to_id,
            related_lead_id=related_lead_id,
            priority=priority,
        )
        return task_id

    async def sync_lead(
        self, tenant_id: str, lead_id: str, provider: str | None = None
    ) -> dict[str, Any]:
        self._record("crm_sync", tenant_id, lead_id=lead_id, provider=provider)
        return {"provider": provider or "default", "leadId": lead_id}

    async def notify(
        self,
        tenant_id: str,
        *,
        title: str,
        message: str,
        notification_type: str,
        target_user_id: str | None,
        data: dict[str, Any],
    ) -> None:
        self._record(
            "notification",
            tenant_id,
            title=title,
            message=message,
            notification_type=notification_type,
            target_user_id=target_user_id,
            data=data,
        )

    async def enroll(
        self, tenant_id: str, lead_id: str, sequence_id: str, next_step_at: datetime
    ) -> str:
        enrollment_id = uuid.uuid4().hex
        self._record(
            "sequence",
            tenant_id,
            enrollment_id=enrollment_id,
            lead_id=lead_id,
            sequence_id=sequence_id,
            next_step_at=next_step_at.isoformat(),
        )
        return enrollment_id
