"""Action handlers backed by the integration protocols.

Each handler receives its action with template tokens already substituted
and reads anything else it needs (recipient, lead id) from the event
payload. Missing inputs raise ``ActionValidationError``; errors from the
underlying service propagate so the dispatcher can record them.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import structlog

from ringrules.application.condition_evaluator import MISSING, resolve_path
from ringrules.core.domain.actions import (
    AddToSequenceAction,
    AssignLeadAction,
    CreateTaskAction,
    NotifyAction,
    SendEmailAction,
    SendSmsAction,
    SyncCrmAction,
    UpdateLeadAction,
)
from ringrules.core.domain.errors import ActionValidationError
from ringrules.core.interfaces.action_handler import ActionContext
from ringrules.core.interfaces.integrations import (
    CrmSyncProtocol,
    EmailSenderProtocol,
    LeadServiceProtocol,
    NotificationServiceProtocol,
    SequenceServiceProtocol,
    SmsSenderProtocol,
    TaskServiceProtocol,
)
from ringrules.core.utils.time import utc_now

logger = structlog.get_logger(__name__)


def _lookup(payload: dict[str, Any], path: str | None, fallback: str | None = None) -> Any:
    """Resolve ``path`` in the payload, then ``fallback``; None when neither is set."""
    for candidate in (path, fallback):
        if not candidate:
            continue
        value = resolve_path(payload, candidate)
        if value is not MISSING and value not in (None, ""):
            return value
    return None


def _lead_id(context: ActionContext, action_type: str) -> str:
    """The lead an action applies to: ``leadId``, else ``id``."""
    lead_id = _lookup(context.payload, "leadId", "id")
    if lead_id is None:
        raise ActionValidationError(
            "Event payload has no leadId or id",
            action_type=action_type,
            missing_fields=["leadId"],
        )
    return str(lead_id)


class SendSmsHandler:
    def __init__(self, sender: SmsSenderProtocol) -> None:
        self._sender = sender

    async def execute(self, action: SendSmsAction, context: ActionContext) -> dict[str, Any]:
        phone = _lookup(context.payload, action.phone_field, "phone")
        if phone is None:
            raise ActionValidationError(
                f"No phone number at '{action.phone_field}'",
                action_type=action.action_type.value,
                missing_fields=[action.phone_field],
            )
        provider = await self._sender.send_sms(context.tenant_id, str(phone), action.message)
        return {"sent": True, "phone": str(phone), "provider": provider}


class SendEmailHandler:
    def __init__(self, sender: EmailSenderProtocol) -> None:
        self._sender = sender

    async def execute(self, action: SendEmailAction, context: ActionContext) -> dict[str, Any]:
        email = _lookup(context.payload, action.email_field, "email")
        if email is None:
            raise ActionValidationError(
                f"No email address at '{action.email_field}'",
                action_type=action.action_type.value,
                missing_fields=[action.email_field],
            )
        provider = await self._sender.send_email(
            context.tenant_id, str(email), action.subject, action.body
        )
        return {"sent": True, "email": str(email), "provider": provider}


class UpdateLeadHandler:
    def __init__(self, leads: LeadServiceProtocol) -> None:
        self._leads = leads

    async def execute(self, action: UpdateLeadAction, context: ActionContext) -> dict[str, Any]:
        lead_id = _lead_id(context, action.action_type.value)
        await self._leads.update_lead(context.tenant_id, lead_id, dict(action.updates))
        return {"updated": True, "leadId": lead_id, "fields": sorted(action.updates)}


class AssignLeadHandler:
    def __init__(self, leads: LeadServiceProtocol) -> None:
        self._leads = leads

    async def execute(self, action: AssignLeadAction, context: ActionContext) -> dict[str, Any]:
        lead_id = _lead_id(context, action.action_type.value)
        agent_id = await self._leads.assign_lead(
            context.tenant_id, lead_id, action.strategy, action.agent_id
        )
        return {"assigned": agent_id is not None, "leadId": lead_id, "agentId": agent_id}


class CreateTaskHandler:
    def __init__(self, tasks: TaskServiceProtocol) -> None:
        self._tasks = tasks

    async def execute(self, action: CreateTaskAction, context: ActionContext) -> dict[str, Any]:
        due_at = (
            utc_now() + timedelta(hours=action.due_in_hours) if action.due_in_hours else None
        )
        assignee = _lookup(context.payload, action.assign_to_field)
        related = _lookup(context.payload, "leadId", "id")
        task_id = await self._tasks.create_task(
            context.tenant_id,
            title=action.title,
            description=action.description,
            due_at=due_at,
            assigned_to_id=str(assignee) if assignee is not None else None,
            related_lead_id=str(related) if related is not None else None,
            priority=action.priority,
        )
        return {"created": True, "taskId": task_id}


class SyncCrmHandler:
    def __init__(self, crm: CrmSyncProtocol) -> None:
        self._crm = crm

    async def execute(self, action: SyncCrmAction, context: ActionContext) -> dict[str, Any]:
        lead_id = _lead_id(context, action.action_type.value)
        result = await self._crm.sync_lead(context.tenant_id, lead_id, action.provider)
        return {"synced": True, "leadId": lead_id, "result": result}


class NotifyHandler:
    def __init__(self, notifications: NotificationServiceProtocol) -> None:
        self._notifications = notifications

    async def execute(self, action: NotifyAction, context: ActionContext) -> dict[str, Any]:
        await self._notifications.notify(
            context.tenant_id,
            title=action.title,
            message=action.message,
            notification_type=action.notification_type,
            target_user_id=action.target_user_id,
            data=dict(context.payload),
        )
        return {"notified": True}


class AddToSequenceHandler:
    def __init__(self, sequences: SequenceServiceProtocol) -> None:
        self._sequences = sequences

    async def execute(
        self, action: AddToSequenceAction, context: ActionContext
    ) -> dict[str, Any]:
        lead_id = _lead_id(context, action.action_type.value)
        next_step_at = utc_now() + timedelta(minutes=action.delay_minutes)
        enrollment_id = await self._sequences.enroll(
            context.tenant_id, lead_id, action.sequence_id, next_step_at
        )
        logger.debug(
            "action_handler.sequence_enrolled",
            tenant_id=context.tenant_id,
            lead_id=lead_id,
            sequence_id=action.sequence_id,
        )
        return {
            "enrolled": True,
            "sequenceId": action.sequence_id,
            "enrollmentId": enrollment_id,
            "nextStepAt": next_step_at.isoformat(),
        }
