"""Protocols for the external services action handlers call.

These are the contracts to the rest of the product (lead records, tasks,
sequences, in-app notifications) and to messaging/CRM providers. Concrete
provider clients live outside this package; ``InMemoryOutbox`` implements
all of them for development and tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


class SmsSenderProtocol(Protocol):
    """Sends SMS messages from a tenant's number."""

    async def send_sms(self, tenant_id: str, to: str, body: str) -> dict[str, Any]:
        """Send a message and return provider metadata (message id, status)."""
        ...


class EmailSenderProtocol(Protocol):
    """Sends transactional email."""

    async def send_email(
        self, tenant_id: str, to: str, subject: str, html: str
    ) -> dict[str, Any]:
        """Send an email and return provider metadata."""
        ...


class LeadServiceProtocol(Protocol):
    """Lead record operations owned by the lead subsystem."""

    async def update_lead(
        self, tenant_id: str, lead_id: str, updates: dict[str, Any]
    ) -> None:
        """Apply field updates to a lead."""
        ...

    async def assign_lead(
        self, tenant_id: str, lead_id: str, strategy: str, agent_id: str | None = None
    ) -> str | None:
        """Assign a lead using ``strategy``; return the chosen agent id."""
        ...


class TaskServiceProtocol(Protocol):
    """Follow-up task creation."""

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
        """Create a task and return its id."""
        ...


class CrmSyncProtocol(Protocol):
    """Pushes lead data to the tenant's connected CRM."""

    async def sync_lead(
        self, tenant_id: str, lead_id: str, provider: str | None = None
    ) -> dict[str, Any]:
        """Sync a lead and return the provider's response summary."""
        ...


class NotificationServiceProtocol(Protocol):
    """In-app notifications for the tenant's team."""

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
        """Create a notification (and push it to connected clients)."""
        ...


class SequenceServiceProtocol(Protocol):
    """Drip-campaign enrollment."""

    async def enroll(
        self, tenant_id: str, lead_id: str, sequence_id: str, next_step_at: datetime
    ) -> str:
        """Enroll a lead and return the enrollment id."""
        ...
