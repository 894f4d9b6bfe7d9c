"""
Automation API Routes
=====================

HTTP endpoints for managing a tenant's automation.

Endpoints (all under /api/v1/automation):
- GET/POST /rules, GET/PUT/DELETE /rules/{rule_id} - Rule CRUD
- GET /logs - Execution log, newest first
- GET /templates, POST /templates/{template_id}/install - Templates
- GET /scheduler/status, POST /scheduler/run/{job_name} - Scheduler
- GET /events, GET /actions - Catalog listings
- POST /trigger - Publish an event manually
- POST /test - Dry-run a draft rule against sample data

The tenant comes from the ``X-Tenant-ID`` header. Domain errors raised by
the application layer are translated by the app-level exception handler.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from ringrules.api.dependencies import get_runtime, get_tenant_id
from ringrules.api.schemas.automation_schemas import (
    ActionListResponse,
    DryRunRequest,
    DryRunResponse,
    EventListResponse,
    JobStatusResponse,
    LogEntryResponse,
    LogListResponse,
    RuleCreate,
    RuleListResponse,
    RuleResponse,
    RuleUpdate,
    RunJobResponse,
    SchedulerStatusResponse,
    TemplateListResponse,
    TriggerRequest,
    TriggerResponse,
)
from ringrules.application.runtime_builder import AutomationRuntime
from ringrules.core.domain.errors import ConflictError
from ringrules.core.domain.execution import ExecutionStatus
from ringrules.core.domain.schedule import RunResult

router = APIRouter(prefix="/automation")


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@router.get("/rules", response_model=RuleListResponse)
async def list_rules(
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> RuleListResponse:
    """List the tenant's rules in dispatch order."""
    rules = await runtime.rules.list_rules(tenant_id)
    return RuleListResponse(
        rules=[RuleResponse.from_domain(r) for r in rules], total=len(rules)
    )


@router.post("/rules", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    body: RuleCreate,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> RuleResponse:
    rule = await runtime.rules.create_rule(tenant_id, body.to_fields())
    return RuleResponse.from_domain(rule)


@router.get("/rules/{rule_id}", response_model=RuleResponse)
async def get_rule(
    rule_id: str,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> RuleResponse:
    return RuleResponse.from_domain(await runtime.rules.get_rule(tenant_id, rule_id))


@router.put("/rules/{rule_id}", response_model=RuleResponse)
async def update_rule(
    rule_id: str,
    body: RuleUpdate,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> RuleResponse:
    """Partially update a rule; omitted fields keep their values."""
    rule = await runtime.rules.update_rule(tenant_id, rule_id, body.to_changes())
    return RuleResponse.from_domain(rule)


@router.delete("/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(
    rule_id: str,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> Response:
    await runtime.rules.delete_rule(tenant_id, rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Execution log
# ---------------------------------------------------------------------------


@router.get("/logs", response_model=LogListResponse)
async def list_logs(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    log_status: Optional[ExecutionStatus] = Query(None, alias="status"),
    rule_id: Optional[str] = Query(None, alias="ruleId"),
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> LogListResponse:
    """Page through the execution log, newest entries first."""
    entries, total = await runtime.execution_log.list_entries(
        tenant_id, limit=limit, offset=offset, status=log_status, rule_id=rule_id
    )
    return LogListResponse(
        logs=[LogEntryResponse.from_domain(e) for e in entries],
        total=total,
        limit=limit,
        offset=offset,
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@router.get("/templates", response_model=TemplateListResponse)
async def list_templates(
    runtime: AutomationRuntime = Depends(get_runtime),
) -> TemplateListResponse:
    return TemplateListResponse(
        templates=[t.to_dict() for t in runtime.installer.list_templates()]
    )


@router.post(
    "/templates/{template_id}/install",
    response_model=RuleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def install_template(
    template_id: str,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> RuleResponse:
    """Copy a built-in template into a new enabled rule."""
    rule = await runtime.installer.install(tenant_id, template_id)
    return RuleResponse.from_domain(rule)


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


@router.get("/scheduler/status", response_model=SchedulerStatusResponse)
async def scheduler_status(
    runtime: AutomationRuntime = Depends(get_runtime),
) -> SchedulerStatusResponse:
    scheduler = runtime.scheduler
    return SchedulerStatusResponse(
        running=scheduler.is_running,
        jobs=[JobStatusResponse.from_domain(s) for s in scheduler.status()],
    )


@router.post(
    "/scheduler/run/{job_name}",
    response_model=RunJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def run_job(
    job_name: str,
    runtime: AutomationRuntime = Depends(get_runtime),
) -> RunJobResponse:
    """Start a job now; 409 while a run of the same job is in progress."""
    result = await runtime.scheduler.run_now(job_name)
    if result == RunResult.ALREADY_RUNNING:
        raise ConflictError(
            f"Job {job_name} is already running",
            code=RunResult.ALREADY_RUNNING.value,
            details={"job": job_name},
        )
    return RunJobResponse(accepted=True, job=job_name)


# ---------------------------------------------------------------------------
# Catalogs, manual trigger and dry run
# ---------------------------------------------------------------------------


@router.get("/events", response_model=EventListResponse)
async def list_events(
    runtime: AutomationRuntime = Depends(get_runtime),
) -> EventListResponse:
    return EventListResponse(events=[s.to_dict() for s in runtime.catalog.entries()])


@router.get("/actions", response_model=ActionListResponse)
async def list_actions(
    runtime: AutomationRuntime = Depends(get_runtime),
) -> ActionListResponse:
    return ActionListResponse(actions=runtime.registry.entries())


@router.post(
    "/trigger", response_model=TriggerResponse, status_code=status.HTTP_202_ACCEPTED
)
async def trigger_event(
    body: TriggerRequest,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> TriggerResponse:
    """Publish an event for the tenant; processing continues in the background."""
    event = await runtime.engine.publish(tenant_id, body.event_type, body.payload)
    return TriggerResponse(accepted=True, event_id=event.event_id, event_type=event.type)


@router.post("/test", response_model=DryRunResponse)
async def dry_run_rule(
    body: DryRunRequest,
    tenant_id: str = Depends(get_tenant_id),
    runtime: AutomationRuntime = Depends(get_runtime),
) -> DryRunResponse:
    """Evaluate a draft rule against sample data without executing actions."""
    draft = runtime.rules.build_draft(tenant_id, body.rule.to_fields())
    matched, actions = runtime.engine.dry_run(draft, body.sample_data)
    return DryRunResponse(matched=matched, actions=[a.to_dict() for a in actions])
