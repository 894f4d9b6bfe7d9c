"""Logs command - Read the execution log."""

import typer
from rich.table import Table

from ringrules.api.cli.context import build_cli_runtime, console, require_tenant, run
from ringrules.core.domain.execution import ExecutionStatus

app = typer.Typer(help="Execution log")


@app.command("list")
def list_logs(
    ctx: typer.Context,
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Entries to show"),
    offset: int = typer.Option(0, "--offset", min=0, help="Entries to skip"),
    status: ExecutionStatus | None = typer.Option(None, "--status", help="SUCCESS or FAILED"),
    rule_id: str | None = typer.Option(None, "--rule", help="Only entries of this rule"),
):
    """Show execution log entries, newest first."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    entries, total = run(
        runtime.execution_log.list_entries(
            tenant_id, limit=limit, offset=offset, status=status, rule_id=rule_id
        )
    )

    table = Table(title=f"Execution Log ({len(entries)} of {total})")
    table.add_column("Time", style="dim")
    table.add_column("Rule", style="white")
    table.add_column("Event", style="magenta")
    table.add_column("Status")
    table.add_column("Error", style="red")
    for entry in entries:
        style = "green" if entry.status == ExecutionStatus.SUCCESS else "red"
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            entry.rule_name,
            entry.trigger_event,
            f"[{style}]{entry.status.value}[/{style}]",
            entry.error or "",
        )
    console.print(table)
