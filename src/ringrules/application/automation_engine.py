"""Automation engine: the event publish boundary and processing pipeline.

Product subsystems call ``publish`` whenever their state changes. The
engine validates the event against the catalog and returns immediately;
matching, dispatch and audit logging happen in a background task so a slow
webhook never adds latency to call handling.

For each processed event:
  1. RuleMatcher returns the tenant's matching rules in priority order
  2. One task per rule is started in that order (rules may overlap)
  3. ActionDispatcher runs the rule's actions sequentially, best-effort
  4. One ExecutionLog entry is appended per rule

Nothing raised inside the pipeline reaches the publisher; failure
visibility is the execution log plus structured logs.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from ringrules.application.action_dispatcher import ActionDispatcher
from ringrules.application.condition_evaluator import evaluate
from ringrules.application.rule_matcher import RuleMatcher
from ringrules.application.templating import render_action
from ringrules.core.domain.actions import BaseAction
from ringrules.core.domain.errors import CatalogError
from ringrules.core.domain.event import Event, EventCatalog
from ringrules.core.domain.execution import (
    ActionOutcome,
    FailureReason,
    RuleExecution,
    summarize_outcomes,
)
from ringrules.core.domain.rule import AutomationRule
from ringrules.core.domain.tenant import validate_tenant_id
from ringrules.core.interfaces.execution_log import ExecutionLogProtocol

logger = structlog.get_logger(__name__)


class AutomationEngine:
    """Routes events through matching, dispatch and the execution log."""

    def __init__(
        self,
        catalog: EventCatalog,
        matcher: RuleMatcher,
        dispatcher: ActionDispatcher,
        execution_log: ExecutionLogProtocol,
    ) -> None:
        self._catalog = catalog
        self._matcher = matcher
        self._dispatcher = dispatcher
        self._execution_log = execution_log
        self._tasks: set[asyncio.Task[list[RuleExecution]]] = set()
        self._event_count = 0
        self._rule_count = 0

    @property
    def catalog(self) -> EventCatalog:
        return self._catalog

    @property
    def event_count(self) -> int:
        """Number of events processed."""
        return self._event_count

    @property
    def rule_count(self) -> int:
        """Number of rule firings executed."""
        return self._rule_count

    @property
    def pending(self) -> int:
        """Background processing tasks still in flight."""
        return len(self._tasks)

    def create_event(
        self,
        tenant_id: str,
        event_type: str,
        payload: dict[str, Any] | None = None,
        *,
        allow_reserved: bool = False,
    ) -> Event:
        """Validate and build an event.

        Raises:
            ValidationError: Invalid tenant id.
            CatalogError: Unknown event type, or a reserved type without
                ``allow_reserved``.
        """
        validate_tenant_id(tenant_id)
        spec = self._catalog.require(event_type)
        if spec.reserved and not allow_reserved:
            raise CatalogError(
                f"Event type is reserved for internal use: {event_type}",
                kind="event",
                identifier=event_type,
            )
        payload = dict(payload or {})
        missing = self._catalog.missing_fields(event_type, payload)
        if missing:
            logger.warning(
                "automation_engine.payload_fields_missing",
                tenant_id=tenant_id,
                event_type=event_type,
                missing=missing,
            )
        return Event(tenant_id=tenant_id, type=event_type, payload=payload)

    async def publish(
        self,
        tenant_id: str,
        event_type: str,
        payload: dict[str, Any] | None = None,
    ) -> Event:
        """Accept an event and process it in the background.

        Validation errors are raised to the publisher; everything after
        acceptance is fire-and-forget.
        """
        event = self.create_event(tenant_id, event_type, payload)
        task = asyncio.create_task(self._process_safely(event), name=f"automation-{event.event_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(
            "automation_engine.published",
            tenant_id=tenant_id,
            event_id=event.event_id,
            event_type=event_type,
        )
        return event

    async def drain(self) -> None:
        """Wait until every background task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _process_safely(self, event: Event) -> list[RuleExecution]:
        try:
            return await self.process(event)
        except Exception as exc:
            logger.error(
                "automation_engine.process_failed",
                tenant_id=event.tenant_id,
                event_id=event.event_id,
                error=str(exc),
            )
            return []

    async def process(self, event: Event) -> list[RuleExecution]:
        """Match and execute rules for ``event`` and wait for them to finish.

        Returns:
            One RuleExecution per matched rule, in dispatch order.
        """
        self._event_count += 1
        try:
            rules = await self._matcher.match(event.tenant_id, event)
        except Exception as exc:
            logger.error(
                "automation_engine.match_failed",
                tenant_id=event.tenant_id,
                event_id=event.event_id,
                event_type=event.type,
                error=str(exc),
            )
            return []

        if not rules:
            logger.debug(
                "automation_engine.no_matching_rules",
                tenant_id=event.tenant_id,
                event_id=event.event_id,
                event_type=event.type,
            )
            return []

        # Tasks start in creation order, so higher priority rules begin first.
        tasks = [
            asyncio.create_task(self._run_rule(rule, event), name=f"rule-{rule.id}")
            for rule in rules
        ]
        return list(await asyncio.gather(*tasks))

    async def _run_rule(self, rule: AutomationRule, event: Event) -> RuleExecution:
        """Dispatch one rule and append its log entry."""
        self._rule_count += 1
        try:
            outcomes = await self._dispatcher.dispatch(rule, event)
        except Exception as exc:
            outcomes = [ActionOutcome.failed("rule", FailureReason.PROVIDER, str(exc))]
        status, error = summarize_outcomes(outcomes)

        log_entry_id: str | None = None
        try:
            entry = await self._execution_log.record(
                event.tenant_id,
                rule,
                status,
                error,
                event=event,
                results=[o.to_dict() for o in outcomes],
            )
            log_entry_id = entry.id
        except Exception as exc:
            logger.error(
                "automation_engine.log_failed",
                tenant_id=event.tenant_id,
                rule_id=rule.id,
                event_id=event.event_id,
                error=str(exc),
            )

        logger.info(
            "automation_engine.rule_executed",
            tenant_id=event.tenant_id,
            rule_id=rule.id,
            rule_name=rule.name,
            event_id=event.event_id,
            status=status.value,
        )
        return RuleExecution(
            rule_id=rule.id,
            rule_name=rule.name,
            status=status,
            outcomes=outcomes,
            error=error,
            log_entry_id=log_entry_id,
        )

    def dry_run(
        self, rule: AutomationRule, payload: dict[str, Any]
    ) -> tuple[bool, list[BaseAction]]:
        """Evaluate a draft rule against sample data without executing it.

        Returns:
            Whether the rule would match, and its actions with template
            tokens substituted.
        """
        matched = rule.is_active and evaluate(rule.conditions, payload)
        rendered = [render_action(action, payload) for action in rule.actions]
        return matched, rendered
