"""
Domain Models

Events and the event catalog, rules and conditions, the closed action
set, execution log records, templates and scheduler jobs.
"""

from ringrules.core.domain.actions import ActionType, BaseAction, parse_action
from ringrules.core.domain.event import Event, EventCatalog, EventType
from ringrules.core.domain.execution import (
    ActionOutcome,
    ExecutionLogEntry,
    ExecutionStatus,
    FailureReason,
)
from ringrules.core.domain.rule import AutomationRule, Condition, ConditionOperator

__all__ = [
    "ActionOutcome",
    "ActionType",
    "AutomationRule",
    "BaseAction",
    "Condition",
    "ConditionOperator",
    "Event",
    "EventCatalog",
    "EventType",
    "ExecutionLogEntry",
    "ExecutionStatus",
    "FailureReason",
    "parse_action",
]
