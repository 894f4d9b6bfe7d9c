"""
Runtime Builder

Wires the automation components from an engine configuration:
- File-backed rule store and execution log under ``work_dir``
- Action registry with one handler per action type
- Matcher, dispatcher and the automation engine
- Template installer and the interval scheduler
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from ringrules.application.action_dispatcher import ActionDispatcher
from ringrules.application.action_registry import ActionRegistry
from ringrules.application.automation_engine import AutomationEngine
from ringrules.application.rule_matcher import RuleMatcher
from ringrules.application.rule_service import RuleService
from ringrules.application.template_installer import TemplateInstaller
from ringrules.core.domain.actions import ActionType
from ringrules.core.domain.config_schema import EngineConfigSchema
from ringrules.core.domain.event import EventCatalog
from ringrules.core.interfaces.execution_log import ExecutionLogProtocol
from ringrules.core.interfaces.rule_store import RuleStoreProtocol
from ringrules.infrastructure.actions.handlers import (
    AddToSequenceHandler,
    AssignLeadHandler,
    CreateTaskHandler,
    NotifyHandler,
    SendEmailHandler,
    SendSmsHandler,
    SyncCrmHandler,
    UpdateLeadHandler,
)
from ringrules.infrastructure.actions.webhook import WebhookHandler
from ringrules.infrastructure.integrations.in_memory_outbox import InMemoryOutbox
from ringrules.infrastructure.persistence.file_execution_log import FileExecutionLog
from ringrules.infrastructure.persistence.file_rule_store import FileRuleStore
from ringrules.infrastructure.scheduler.scheduler_service import SchedulerService

logger = structlog.get_logger(__name__)


@dataclass
class AutomationRuntime:
    """Everything the API and CLI need, built once per process."""

    config: EngineConfigSchema
    catalog: EventCatalog
    rule_store: RuleStoreProtocol
    execution_log: ExecutionLogProtocol
    registry: ActionRegistry
    engine: AutomationEngine
    rules: RuleService
    installer: TemplateInstaller
    scheduler: SchedulerService


def build_registry(integrations: Any, action_timeout: float) -> ActionRegistry:
    """Register a handler for every action type.

    ``integrations`` must implement all protocols in
    ``ringrules.core.interfaces.integrations``.
    """
    registry = ActionRegistry()
    registry.register(ActionType.SEND_SMS, SendSmsHandler(integrations))
    registry.register(ActionType.SEND_EMAIL, SendEmailHandler(integrations))
    registry.register(ActionType.UPDATE_LEAD, UpdateLeadHandler(integrations))
    registry.register(ActionType.ASSIGN_LEAD, AssignLeadHandler(integrations))
    registry.register(ActionType.CREATE_TASK, CreateTaskHandler(integrations))
    registry.register(ActionType.SYNC_CRM, SyncCrmHandler(integrations))
    registry.register(ActionType.NOTIFY, NotifyHandler(integrations))
    registry.register(ActionType.WEBHOOK, WebhookHandler(timeout_seconds=action_timeout))
    registry.register(ActionType.ADD_TO_SEQUENCE, AddToSequenceHandler(integrations))
    return registry


def build_runtime(
    config: EngineConfigSchema | None = None,
    *,
    integrations: Any = None,
    rule_store: RuleStoreProtocol | None = None,
    execution_log: ExecutionLogProtocol | None = None,
) -> AutomationRuntime:
    """Assemble the runtime, defaulting to file stores and the in-memory outbox."""
    config = config or EngineConfigSchema()
    timeout = config.dispatcher.action_timeout_seconds
    catalog = EventCatalog()
    rule_store = rule_store or FileRuleStore(config.work_dir)
    execution_log = execution_log or FileExecutionLog(config.work_dir)
    registry = build_registry(integrations or InMemoryOutbox(), timeout)

    engine = AutomationEngine(
        catalog=catalog,
        matcher=RuleMatcher(rule_store),
        dispatcher=ActionDispatcher(registry, action_timeout=timeout),
        execution_log=execution_log,
    )
    scheduler = SchedulerService(
        engine, rule_store, intervals=dict(config.scheduler.intervals)
    )
    logger.info(
        "runtime_builder.built",
        work_dir=config.work_dir,
        action_timeout=timeout,
        actions=len(registry.registered_types()),
    )
    return AutomationRuntime(
        config=config,
        catalog=catalog,
        rule_store=rule_store,
        execution_log=execution_log,
        registry=registry,
        engine=engine,
        rules=RuleService(rule_store, catalog),
        installer=TemplateInstaller(rule_store),
        scheduler=scheduler,
    )
