"""
Automation API Schemas
======================

Pydantic request/response models for the automation management API.

Field names are snake_case in Python and camelCase on the wire
(``triggerEvent``, ``createdAt``) to match the stored rule documents.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ringrules.core.domain.execution import ExecutionLogEntry
from ringrules.core.domain.rule import MAX_PRIORITY, MIN_PRIORITY, AutomationRule
from ringrules.core.domain.schedule import JobStatus


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConditionSchema(CamelModel):
    field: str = Field(..., min_length=1, description="Dot path into the event payload")
    operator: str = Field(..., description="equals, notEquals, contains, ...")
    value: Any = None


class RuleCreate(CamelModel):
    """Request schema for creating a rule."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    trigger_event: str = Field(..., min_length=1, description="Event catalog identifier")
    conditions: list[ConditionSchema] = Field(default_factory=list)
    actions: list[dict[str, Any]] = Field(
        default_factory=list, description="Action objects with a 'type' key"
    )
    enabled: bool = True
    priority: int = Field(0, ge=MIN_PRIORITY, le=MAX_PRIORITY)

    def to_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "trigger_event": self.trigger_event,
            "conditions": [c.model_dump() for c in self.conditions],
            "actions": self.actions,
            "enabled": self.enabled,
            "priority": self.priority,
        }


class RuleUpdate(CamelModel):
    """Request schema for a partial rule update."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    trigger_event: Optional[str] = None
    conditions: Optional[list[ConditionSchema]] = None
    actions: Optional[list[dict[str, Any]]] = None
    enabled: Optional[bool] = None
    priority: Optional[int] = Field(None, ge=MIN_PRIORITY, le=MAX_PRIORITY)

    def to_changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class RuleResponse(CamelModel):
    id: str
    tenant_id: str
    name: str
    description: Optional[str] = None
    trigger_event: str
    conditions: list[dict[str, Any]]
    actions: list[dict[str, Any]]
    enabled: bool
    priority: int
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, rule: AutomationRule) -> RuleResponse:
        return cls.model_validate(rule.to_dict())


class RuleListResponse(CamelModel):
    rules: list[RuleResponse]
    total: int


class LogEntryResponse(CamelModel):
    id: str
    tenant_id: str
    rule_id: str
    rule_name: str
    trigger_event: str
    status: str
    error: Optional[str] = None
    event_id: Optional[str] = None
    results: list[dict[str, Any]] = Field(default_factory=list)
    created_at: str

    @classmethod
    def from_domain(cls, entry: ExecutionLogEntry) -> LogEntryResponse:
        return cls.model_validate(entry.to_dict())


class LogListResponse(CamelModel):
    logs: list[LogEntryResponse]
    total: int
    limit: int
    offset: int


class TemplateListResponse(CamelModel):
    templates: list[dict[str, Any]]


class EventListResponse(CamelModel):
    events: list[dict[str, Any]]


class ActionListResponse(CamelModel):
    actions: list[dict[str, Any]]


class JobStatusResponse(CamelModel):
    name: str
    interval: int
    interval_human: str
    description: str
    state: str
    last_run_at: Optional[str] = None
    last_finished_at: Optional[str] = None
    run_count: int = 0
    skipped_count: int = 0
    last_error: Optional[str] = None

    @classmethod
    def from_domain(cls, status: JobStatus) -> JobStatusResponse:
        return cls.model_validate(status.to_dict())


class SchedulerStatusResponse(CamelModel):
    running: bool
    jobs: list[JobStatusResponse]


class RunJobResponse(CamelModel):
    accepted: bool
    job: str


class TriggerRequest(CamelModel):
    """Publish an event manually."""

    event_type: str = Field(..., min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class TriggerResponse(CamelModel):
    accepted: bool
    event_id: str
    event_type: str


class DryRunRequest(CamelModel):
    """Dry-run a draft rule against sample event data."""

    rule: RuleCreate
    sample_data: dict[str, Any] = Field(default_factory=dict)


class DryRunResponse(CamelModel):
    matched: bool
    actions: list[dict[str, Any]]
