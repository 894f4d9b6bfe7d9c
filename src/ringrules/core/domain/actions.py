"""Closed set of automation actions.

Each action type is its own frozen dataclass carrying exactly the fields
that type needs. Field metadata maps attribute names to the camelCase keys
used by the management API and the stored rule documents, and marks which
fields must be non-blank before the action can run.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Union

from ringrules.core.domain.errors import CatalogError, ValidationError


class ActionType(str, Enum):
    """Identifiers of the supported action types."""

    SEND_SMS = "sendSms"
    SEND_EMAIL = "sendEmail"
    UPDATE_LEAD = "updateLead"
    ASSIGN_LEAD = "assignLead"
    CREATE_TASK = "createTask"
    SYNC_CRM = "syncCrm"
    NOTIFY = "notify"
    WEBHOOK = "webhook"
    ADD_TO_SEQUENCE = "addToSequence"


class AssignStrategy(str, Enum):
    """How ``assignLead`` picks an agent."""

    ROUND_ROBIN = "roundRobin"
    LEAST_BUSY = "leastBusy"
    SPECIFIC = "specific"


def _attr(wire: str, default: Any = "", *, required: bool = False, kind: str = "str") -> Any:
    if kind == "map":
        return field(
            default_factory=dict, metadata={"wire": wire, "required": required, "kind": kind}
        )
    return field(default=default, metadata={"wire": wire, "required": required, "kind": kind})


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, dict):
        return not value
    return False


def _coerce(kind: str, value: Any) -> Any:
    if value is None:
        return None
    if kind == "map":
        if not isinstance(value, dict):
            raise ValidationError(f"Expected an object, got {type(value).__name__}")
        return copy.deepcopy(value)
    if kind == "float":
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Expected a number, got {value!r}") from exc
    if kind == "int":
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Expected an integer, got {value!r}") from exc
    return str(value)


@dataclass(frozen=True)
class BaseAction:
    """Shared serialization and validation for action variants."""

    action_type: ClassVar[ActionType]
    label: ClassVar[str] = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape ``{"type": ..., <camelCase fields>}``."""
        data: dict[str, Any] = {"type": self.action_type.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[f.metadata["wire"]] = copy.deepcopy(value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BaseAction:
        """Build the variant from a wire dict; unknown keys are ignored."""
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            wire = f.metadata["wire"]
            if wire in data:
                kwargs[f.name] = _coerce(f.metadata["kind"], data[wire])
        return cls(**kwargs)

    @classmethod
    def required_fields(cls) -> list[str]:
        return [f.metadata["wire"] for f in fields(cls) if f.metadata.get("required")]

    def missing_fields(self) -> list[str]:
        """Wire names of required fields that are blank."""
        return [
            f.metadata["wire"]
            for f in fields(self)
            if f.metadata.get("required") and _is_blank(getattr(self, f.name))
        ]


@dataclass(frozen=True)
class SendSmsAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.SEND_SMS
    label: ClassVar[str] = "Send SMS"

    phone_field: str = _attr("phoneField", required=True)
    message: str = _attr("message", required=True)


@dataclass(frozen=True)
class SendEmailAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.SEND_EMAIL
    label: ClassVar[str] = "Send Email"

    subject: str = _attr("subject", required=True)
    body: str = _attr("body", required=True)
    email_field: str = _attr("emailField", "email")


@dataclass(frozen=True)
class UpdateLeadAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.UPDATE_LEAD
    label: ClassVar[str] = "Update Lead"

    updates: dict[str, Any] = _attr("updates", required=True, kind="map")


@dataclass(frozen=True)
class AssignLeadAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.ASSIGN_LEAD
    label: ClassVar[str] = "Assign Lead"

    strategy: str = _attr("strategy", AssignStrategy.ROUND_ROBIN.value)
    agent_id: str | None = _attr("agentId", None)

    def missing_fields(self) -> list[str]:
        missing = super().missing_fields()
        if self.strategy == AssignStrategy.SPECIFIC.value and _is_blank(self.agent_id):
            missing.append("agentId")
        return missing

    def __post_init__(self) -> None:
        valid = {s.value for s in AssignStrategy}
        if self.strategy not in valid:
            raise ValidationError(
                f"Unknown assignment strategy: {self.strategy}",
                details={"allowed": sorted(valid)},
            )


@dataclass(frozen=True)
class CreateTaskAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.CREATE_TASK
    label: ClassVar[str] = "Create Task"

    title: str = _attr("title", required=True)
    description: str = _attr("description")
    due_in_hours: float | None = _attr("dueInHours", None, kind="float")
    assign_to_field: str | None = _attr("assignToField", None)
    priority: str = _attr("priority", "MEDIUM")


@dataclass(frozen=True)
class SyncCrmAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.SYNC_CRM
    label: ClassVar[str] = "Sync to CRM"

    provider: str | None = _attr("provider", None)


@dataclass(frozen=True)
class NotifyAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.NOTIFY
    label: ClassVar[str] = "Internal Notification"

    message: str = _attr("message", required=True)
    title: str = _attr("title", "Automation Notification")
    notification_type: str = _attr("notificationType", "INFO")
    target_user_id: str | None = _attr("targetUserId", None)


@dataclass(frozen=True)
class WebhookAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.WEBHOOK
    label: ClassVar[str] = "Call Webhook"

    url: str = _attr("url", required=True)
    method: str = _attr("method", "POST")
    headers: dict[str, Any] = _attr("headers", kind="map")


@dataclass(frozen=True)
class AddToSequenceAction(BaseAction):
    action_type: ClassVar[ActionType] = ActionType.ADD_TO_SEQUENCE
    label: ClassVar[str] = "Add to Sequence"

    sequence_id: str = _attr("sequenceId", required=True)
    delay_minutes: int = _attr("delayMinutes", 60, kind="int")


Action = Union[
    SendSmsAction,
    SendEmailAction,
    UpdateLeadAction,
    AssignLeadAction,
    CreateTaskAction,
    SyncCrmAction,
    NotifyAction,
    WebhookAction,
    AddToSequenceAction,
]

ACTION_CLASSES: dict[ActionType, type[BaseAction]] = {
    cls.action_type: cls
    for cls in (
        SendSmsAction,
        SendEmailAction,
        UpdateLeadAction,
        AssignLeadAction,
        CreateTaskAction,
        SyncCrmAction,
        NotifyAction,
        WebhookAction,
        AddToSequenceAction,
    )
}


def parse_action(data: Any) -> BaseAction:
    """Parse a wire dict into its action variant.

    Raises:
        ValidationError: ``data`` is not an object or has no ``type``.
        CatalogError: ``type`` is not a known action type.
    """
    if not isinstance(data, dict):
        raise ValidationError("Action must be an object")
    raw_type = data.get("type")
    if not raw_type:
        raise ValidationError("Action is missing 'type'")
    try:
        action_type = ActionType(raw_type)
    except ValueError as exc:
        raise CatalogError(
            f"Unknown action type: {raw_type}", kind="action", identifier=str(raw_type)
        ) from exc
    return ACTION_CLASSES[action_type].from_dict(data)
