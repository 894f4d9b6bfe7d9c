"""Domain event models and the trigger-event catalog.

Defines the events that product subsystems (calls, leads, appointments,
billing) publish into the automation pipeline, and the static catalog that
says which event types exist and which payload fields each one carries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from ringrules.core.domain.errors import CatalogError
from ringrules.core.utils.time import parse_timestamp, utc_now


class EventType(str, Enum):
    """Trigger event identifiers understood by the automation pipeline."""

    # Call events
    CALL_STARTED = "call:started"
    CALL_COMPLETED = "call:completed"
    CALL_MISSED = "call:missed"
    CALL_TRANSFERRED = "call:transferred"

    # Lead events
    LEAD_CREATED = "lead:created"
    LEAD_UPDATED = "lead:updated"
    LEAD_STATUS_CHANGED = "lead:statusChanged"
    LEAD_ASSIGNED = "lead:assigned"

    # Appointment events
    APPOINTMENT_BOOKED = "appointment:booked"
    APPOINTMENT_REMINDER = "appointment:reminder"
    APPOINTMENT_CANCELLED = "appointment:cancelled"
    APPOINTMENT_NO_SHOW = "appointment:noShow"

    # Feedback events
    FEEDBACK_SUBMITTED = "feedback:submitted"
    FEEDBACK_APPROVED = "feedback:approved"

    # Usage events
    USAGE_THRESHOLD_80 = "usage:threshold80"
    USAGE_THRESHOLD_90 = "usage:threshold90"
    USAGE_LIMIT_REACHED = "usage:limitReached"

    # Trial events
    TRIAL_ENDING_SOON = "trial:endingSoon"
    TRIAL_ENDED = "trial:ended"

    # Channel events
    MESSAGE_RECEIVED = "message:received"
    CONVERSATION_STARTED = "conversation:started"

    # Reserved for the scheduler
    SCHEDULER_TICK = "scheduler:tick"


@dataclass(frozen=True)
class EventSpec:
    """Catalog entry describing one trigger event.

    Attributes:
        event_type: The identifier.
        label: Display label for the management UI.
        fields: Payload fields the emitting subsystem guarantees.
        reserved: True for event types only the engine itself may emit.
    """

    event_type: EventType
    label: str
    fields: tuple[str, ...] = ()
    reserved: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the catalog listing."""
        return {
            "key": self.event_type.name,
            "value": self.event_type.value,
            "label": self.label,
            "fields": list(self.fields),
            "reserved": self.reserved,
        }


_CALL_FIELDS = ("callId", "fromNumber", "toNumber", "callerName", "duration", "status")
_LEAD_FIELDS = ("leadId", "name", "phone", "email", "status", "temperature", "reason")
_APPOINTMENT_FIELDS = ("appointmentId", "callerName", "callerPhone", "scheduledAt", "purpose")
_USAGE_FIELDS = ("resourceType", "used", "limit", "percent")
_TRIAL_FIELDS = ("trialEndsAt", "daysRemaining")

_SPECS: tuple[EventSpec, ...] = (
    EventSpec(EventType.CALL_STARTED, "Call Started", _CALL_FIELDS),
    EventSpec(EventType.CALL_COMPLETED, "Call Completed", _CALL_FIELDS + ("transcript", "summary")),
    EventSpec(EventType.CALL_MISSED, "Call Missed", _CALL_FIELDS),
    EventSpec(EventType.CALL_TRANSFERRED, "Call Transferred", _CALL_FIELDS + ("transferredTo",)),
    EventSpec(EventType.LEAD_CREATED, "Lead Created", _LEAD_FIELDS),
    EventSpec(EventType.LEAD_UPDATED, "Lead Updated", _LEAD_FIELDS),
    EventSpec(
        EventType.LEAD_STATUS_CHANGED,
        "Lead Status Changed",
        _LEAD_FIELDS + ("previousStatus",),
    ),
    EventSpec(EventType.LEAD_ASSIGNED, "Lead Assigned", _LEAD_FIELDS + ("assignedToId",)),
    EventSpec(EventType.APPOINTMENT_BOOKED, "Appointment Booked", _APPOINTMENT_FIELDS),
    EventSpec(EventType.APPOINTMENT_REMINDER, "Appointment Reminder", _APPOINTMENT_FIELDS),
    EventSpec(EventType.APPOINTMENT_CANCELLED, "Appointment Cancelled", _APPOINTMENT_FIELDS),
    EventSpec(EventType.APPOINTMENT_NO_SHOW, "Appointment No-Show", _APPOINTMENT_FIELDS),
    EventSpec(
        EventType.FEEDBACK_SUBMITTED,
        "Feedback Submitted",
        ("feedbackId", "callId", "rating"),
    ),
    EventSpec(
        EventType.FEEDBACK_APPROVED,
        "Feedback Approved",
        ("feedbackId", "question", "answer"),
    ),
    EventSpec(EventType.USAGE_THRESHOLD_80, "Usage 80%", _USAGE_FIELDS),
    EventSpec(EventType.USAGE_THRESHOLD_90, "Usage 90%", _USAGE_FIELDS),
    EventSpec(EventType.USAGE_LIMIT_REACHED, "Usage Limit Reached", _USAGE_FIELDS),
    EventSpec(EventType.TRIAL_ENDING_SOON, "Trial Ending Soon", _TRIAL_FIELDS),
    EventSpec(EventType.TRIAL_ENDED, "Trial Ended", _TRIAL_FIELDS),
    EventSpec(EventType.MESSAGE_RECEIVED, "Message Received", ("channel", "from", "body")),
    EventSpec(
        EventType.CONVERSATION_STARTED,
        "Conversation Started",
        ("channel", "conversationId", "from"),
    ),
    EventSpec(
        EventType.SCHEDULER_TICK,
        "Scheduler Tick",
        ("jobName", "intervalMs", "manual", "firedAt"),
        reserved=True,
    ),
)


class EventCatalog:
    """Static registry of trigger events.

    Injected into the engine and the management API so new event types are
    one entry in ``_SPECS`` rather than literals spread across modules.
    """

    def __init__(self, specs: tuple[EventSpec, ...] = _SPECS) -> None:
        self._specs: dict[str, EventSpec] = {s.event_type.value: s for s in specs}

    def entries(self) -> list[EventSpec]:
        """Return all catalog entries in declaration order."""
        return list(self._specs.values())

    def is_known(self, event_type: str) -> bool:
        return event_type in self._specs

    def get(self, event_type: str) -> EventSpec | None:
        return self._specs.get(event_type)

    def require(self, event_type: str) -> EventSpec:
        """Return the catalog entry or raise ``CatalogError``."""
        spec = self._specs.get(event_type)
        if spec is None:
            raise CatalogError(
                f"Unknown event type: {event_type}",
                kind="event",
                identifier=event_type,
            )
        return spec

    def missing_fields(self, event_type: str, payload: dict[str, Any]) -> list[str]:
        """List documented payload fields absent from ``payload``."""
        spec = self.get(event_type)
        if spec is None:
            return []
        return [name for name in spec.fields if name not in payload]


@dataclass(frozen=True)
class Event:
    """A domain event raised by a product subsystem for one tenant.

    Attributes:
        tenant_id: Owning tenant (organization).
        type: Catalog identifier, e.g. ``"lead:created"``.
        payload: Event data keyed by field name; nested maps allowed.
        occurred_at: When the event happened.
        event_id: Unique identifier, referenced from execution log entries.
    """

    tenant_id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utc_now)
    event_id: str = field(default_factory=lambda: uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event for transport or logging."""
        return {
            "eventId": self.event_id,
            "tenantId": self.tenant_id,
            "type": self.type,
            "payload": self.payload,
            "occurredAt": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        """Deserialize an event from a stored dict."""
        return cls(
            tenant_id=str(data.get("tenantId", "")),
            type=str(data.get("type", "")),
            payload=dict(data.get("payload", {})),
            occurred_at=parse_timestamp(data.get("occurredAt")),
            event_id=str(data.get("eventId", uuid4().hex)),
        )
