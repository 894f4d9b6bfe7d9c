"""Built-in automation templates.

A template is an immutable rule blueprint. Installing one copies its
trigger, conditions and actions into a new tenant-owned rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ringrules.core.domain.actions import (
    AssignLeadAction,
    BaseAction,
    NotifyAction,
    SendSmsAction,
    SyncCrmAction,
)
from ringrules.core.domain.event import EventType
from ringrules.core.domain.rule import Condition, ConditionOperator


@dataclass(frozen=True)
class Template:
    """Immutable rule blueprint."""

    id: str
    name: str
    description: str
    trigger_event: str
    conditions: tuple[Condition, ...] = ()
    actions: tuple[BaseAction, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "triggerEvent": self.trigger_event,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
        }


BUILTIN_TEMPLATES: tuple[Template, ...] = (
    Template(
        id="welcome_sms",
        name="Welcome SMS on New Lead",
        description="Send a welcome SMS when a new lead is created from a call",
        trigger_event=EventType.LEAD_CREATED.value,
        conditions=(Condition("phone", ConditionOperator.EXISTS.value, True),),
        actions=(
            SendSmsAction(
                phone_field="phone",
                message=(
                    "Hi {{name}}, thank you for calling {{organizationName}}! "
                    "We'll be in touch soon."
                ),
            ),
        ),
    ),
    Template(
        id="hot_lead_notify",
        name="Notify Team on Hot Lead",
        description="Send internal notification when a hot lead is detected",
        trigger_event=EventType.LEAD_UPDATED.value,
        conditions=(Condition("temperature", ConditionOperator.EQUALS.value, "HOT"),),
        actions=(
            NotifyAction(
                title="Hot Lead Alert",
                message="{{name}} ({{phone}}) is a hot lead! Reason: {{reason}}",
            ),
        ),
    ),
    Template(
        id="missed_call_followup",
        name="Follow-up on Missed Calls",
        description="Send SMS when a call is missed",
        trigger_event=EventType.CALL_MISSED.value,
        actions=(
            SendSmsAction(
                phone_field="fromNumber",
                message="We missed your call to {{organizationName}}. We'll call you back shortly!",
            ),
        ),
    ),
    Template(
        id="auto_assign_lead",
        name="Auto-Assign Leads",
        description="Automatically assign new leads using round-robin",
        trigger_event=EventType.LEAD_CREATED.value,
        actions=(AssignLeadAction(strategy="roundRobin"),),
    ),
    Template(
        id="crm_sync",
        name="Sync to CRM on Status Change",
        description="Sync lead to CRM when status changes",
        trigger_event=EventType.LEAD_STATUS_CHANGED.value,
        actions=(SyncCrmAction(),),
    ),
    Template(
        id="appointment_confirm",
        name="Appointment Confirmation",
        description="Send confirmation SMS when appointment is booked",
        trigger_event=EventType.APPOINTMENT_BOOKED.value,
        actions=(
            SendSmsAction(
                phone_field="callerPhone",
                message=(
                    "Your appointment with {{organizationName}} is confirmed for "
                    "{{scheduledAt}}. We look forward to seeing you!"
                ),
            ),
        ),
    ),
    Template(
        id="noshow_followup",
        name="No-Show Follow-up",
        description="Send SMS when appointment is marked as no-show",
        trigger_event=EventType.APPOINTMENT_NO_SHOW.value,
        actions=(
            SendSmsAction(
                phone_field="callerPhone",
                message=(
                    "We missed you at your appointment today. Would you like to "
                    "reschedule? Reply YES to rebook."
                ),
            ),
        ),
    ),
    Template(
        id="feedback_applied",
        name="AI Improvement Notification",
        description="Notify when AI feedback is applied",
        trigger_event=EventType.FEEDBACK_APPROVED.value,
        actions=(
            NotifyAction(
                title="AI Improved",
                message="A correction has been applied to improve AI responses.",
            ),
        ),
    ),
)
