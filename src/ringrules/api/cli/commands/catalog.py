"""Catalog command - List events, actions and templates; install templates."""

import typer
from rich.table import Table

from ringrules.api.cli.context import build_cli_runtime, console, require_tenant, run

app = typer.Typer(help="Events, actions and templates")


@app.command("events")
def list_events(ctx: typer.Context):
    """List trigger events and their payload fields."""
    runtime = build_cli_runtime(ctx)
    table = Table(title="Trigger Events")
    table.add_column("Event", style="cyan")
    table.add_column("Label", style="white")
    table.add_column("Fields", style="dim")
    for spec in runtime.catalog.entries():
        label = f"{spec.label} (internal)" if spec.reserved else spec.label
        table.add_row(spec.event_type.value, label, ", ".join(spec.fields))
    console.print(table)


@app.command("actions")
def list_actions(ctx: typer.Context):
    """List action types and their required fields."""
    runtime = build_cli_runtime(ctx)
    table = Table(title="Action Types")
    table.add_column("Type", style="cyan")
    table.add_column("Label", style="white")
    table.add_column("Required", style="yellow")
    table.add_column("Handler")
    for entry in runtime.registry.entries():
        table.add_row(
            entry["type"],
            entry["label"],
            ", ".join(entry["requiredFields"]),
            "[green]yes[/green]" if entry["available"] else "[red]no[/red]",
        )
    console.print(table)


@app.command("templates")
def list_templates(ctx: typer.Context):
    """List built-in rule templates."""
    runtime = build_cli_runtime(ctx)
    table = Table(title="Templates")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Trigger", style="magenta")
    table.add_column("Description", style="dim")
    for template in runtime.installer.list_templates():
        table.add_row(template.id, template.name, template.trigger_event, template.description)
    console.print(table)


@app.command("install")
def install_template(
    ctx: typer.Context,
    template_id: str = typer.Argument(..., help="Template ID"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Install a template as a new rule for the tenant."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    rule = run(runtime.installer.install(tenant_id, template_id))
    console.print(
        f"[green]Installed[/green] {template_id} as rule [cyan]{rule.id}[/cyan]"
    )
