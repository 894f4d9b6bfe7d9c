"""
Core Protocol Interfaces

Contracts for everything the automation pipeline reaches outside itself:
rule persistence, the execution log, action handlers and the external
services (SMS, email, leads, CRM, notifications) those handlers call.
Protocols keep the application layer independent of concrete storage and
providers, and let tests substitute in-memory fakes.
"""

from ringrules.core.interfaces.action_handler import ActionContext, ActionHandlerProtocol
from ringrules.core.interfaces.execution_log import ExecutionLogProtocol
from ringrules.core.interfaces.rule_store import RuleStoreProtocol

__all__ = [
    "ActionContext",
    "ActionHandlerProtocol",
    "ExecutionLogProtocol",
    "RuleStoreProtocol",
]
