"""Execution outcome and audit log models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from ringrules.core.utils.time import parse_timestamp, utc_now


class ExecutionStatus(str, Enum):
    """Outcome of one rule firing."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class FailureReason(str, Enum):
    """Why a single action did not succeed."""

    VALIDATION = "validation"
    PROVIDER = "provider"
    TIMEOUT = "timeout"
    UNKNOWN_ACTION = "unknown_action"


@dataclass(frozen=True)
class ActionOutcome:
    """Result of dispatching one action of a rule.

    Attributes:
        action_type: Wire identifier of the action (``"sendSms"``).
        success: Whether the handler completed.
        result: Handler-specific result data (ids, provider status).
        failure: Failure category when ``success`` is False.
        error: Human-readable failure message.
    """

    action_type: str
    success: bool
    result: dict[str, Any] = field(default_factory=dict)
    failure: FailureReason | None = None
    error: str | None = None

    @classmethod
    def ok(cls, action_type: str, result: dict[str, Any] | None = None) -> ActionOutcome:
        return cls(action_type=action_type, success=True, result=dict(result or {}))

    @classmethod
    def failed(cls, action_type: str, failure: FailureReason, error: str) -> ActionOutcome:
        return cls(action_type=action_type, success=False, failure=failure, error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": self.action_type,
            "success": self.success,
            "result": self.result,
        }
        if self.failure is not None:
            data["failure"] = self.failure.value
        if self.error:
            data["error"] = self.error
        return data


def summarize_outcomes(outcomes: list[ActionOutcome]) -> tuple[ExecutionStatus, str | None]:
    """Collapse per-action outcomes into the rule-level status and error."""
    failures = [o for o in outcomes if not o.success]
    if not failures:
        return ExecutionStatus.SUCCESS, None
    error = "; ".join(f"{o.action_type}: {o.error or o.failure}" for o in failures)
    return ExecutionStatus.FAILED, error


@dataclass(frozen=True)
class ExecutionLogEntry:
    """Append-only audit record of one rule firing for one event.

    ``rule_name`` is denormalized so entries stay readable after the rule
    is deleted.
    """

    tenant_id: str
    rule_id: str
    rule_name: str
    trigger_event: str
    status: ExecutionStatus
    error: str | None = None
    event_id: str | None = None
    results: list[dict[str, Any]] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage and the management API."""
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "triggerEvent": self.trigger_event,
            "status": self.status.value,
            "error": self.error,
            "eventId": self.event_id,
            "results": self.results,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionLogEntry:
        """Deserialize from stored dict."""
        return cls(
            id=str(data.get("id") or uuid4().hex),
            tenant_id=str(data.get("tenantId", "")),
            rule_id=str(data.get("ruleId", "")),
            rule_name=str(data.get("ruleName", "")),
            trigger_event=str(data.get("triggerEvent", "")),
            status=ExecutionStatus(data.get("status", ExecutionStatus.FAILED.value)),
            error=data.get("error"),
            event_id=data.get("eventId"),
            results=list(data.get("results") or []),
            created_at=parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True)
class RuleExecution:
    """In-memory result of running one matched rule, returned by the engine."""

    rule_id: str
    rule_name: str
    status: ExecutionStatus
    outcomes: list[ActionOutcome] = field(default_factory=list)
    error: str | None = None
    log_entry_id: str | None = None
