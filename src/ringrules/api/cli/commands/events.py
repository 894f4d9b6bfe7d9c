"""Events command - Publish an event and show what the rules did."""

import json

import typer
from rich.table import Table

from ringrules.api.cli.context import build_cli_runtime, console, require_tenant, run
from ringrules.core.domain.execution import ExecutionStatus

app = typer.Typer(help="Publish events")


@app.command("trigger")
def trigger_event(
    ctx: typer.Context,
    event_type: str = typer.Argument(..., help="Event type, e.g. lead:created"),
    payload: str = typer.Option("{}", "--payload", "-p", help="JSON payload"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Publish an event and wait for its rules to finish."""
    tenant_id = require_tenant(ctx, tenant)
    try:
        data = json.loads(payload)
    except ValueError as exc:
        console.print(f"[red]Invalid JSON payload: {exc}[/red]")
        raise typer.Exit(1) from exc
    if not isinstance(data, dict):
        console.print("[red]Payload must be a JSON object[/red]")
        raise typer.Exit(1)

    runtime = build_cli_runtime(ctx)

    async def _trigger():
        event = runtime.engine.create_event(tenant_id, event_type, data)
        return event, await runtime.engine.process(event)

    event, executions = run(_trigger())
    console.print(f"[bold]Event:[/bold] {event.type} [dim]({event.event_id})[/dim]")
    if not executions:
        console.print("[yellow]No rules matched[/yellow]")
        return

    table = Table(title="Rule Executions")
    table.add_column("Rule", style="white")
    table.add_column("Status")
    table.add_column("Actions", justify="right")
    table.add_column("Error", style="red")
    for execution in executions:
        ok = execution.status == ExecutionStatus.SUCCESS
        table.add_row(
            execution.rule_name,
            "[green]SUCCESS[/green]" if ok else "[red]FAILED[/red]",
            str(len(execution.outcomes)),
            execution.error or "",
        )
    console.print(table)
