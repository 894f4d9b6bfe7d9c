"""Rules command - Manage a tenant's automation rules."""

import json
from pathlib import Path

import typer
from rich.table import Table

from ringrules.api.cli.context import build_cli_runtime, console, require_tenant, run

app = typer.Typer(help="Rule management")


def _load_definition(path: Path) -> dict:
    """Read a rule definition in API (camelCase) shape from a JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read rule file {path}: {exc}[/red]")
        raise typer.Exit(1) from exc
    if not isinstance(data, dict):
        console.print("[red]Rule file must contain a JSON object[/red]")
        raise typer.Exit(1)
    return {
        "name": data.get("name"),
        "description": data.get("description"),
        "trigger_event": data.get("triggerEvent"),
        "conditions": data.get("conditions") or [],
        "actions": data.get("actions") or [],
        "enabled": data.get("enabled", True),
        "priority": data.get("priority", 0),
    }


@app.command("list")
def list_rules(
    ctx: typer.Context,
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """List rules in dispatch order."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    rules = run(runtime.rules.list_rules(tenant_id))

    table = Table(title=f"Automation Rules ({tenant_id})")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Trigger", style="magenta")
    table.add_column("Priority", justify="right")
    table.add_column("Enabled", style="green")
    table.add_column("Actions", justify="right")
    for rule in rules:
        table.add_row(
            rule.id,
            rule.name,
            rule.trigger_event,
            str(rule.priority),
            "yes" if rule.enabled else "no",
            str(len(rule.actions)),
        )
    console.print(table)


@app.command("show")
def show_rule(
    ctx: typer.Context,
    rule_id: str = typer.Argument(..., help="Rule ID"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Show a rule as JSON."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    rule = run(runtime.rules.get_rule(tenant_id, rule_id))
    console.print_json(data=rule.to_dict())


@app.command("add")
def add_rule(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="JSON file with the rule definition"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Create a rule from a JSON definition."""
    tenant_id = require_tenant(ctx, tenant)
    definition = _load_definition(file)
    runtime = build_cli_runtime(ctx)
    rule = run(runtime.rules.create_rule(tenant_id, definition))
    console.print(f"[green]Created rule[/green] [cyan]{rule.id}[/cyan] ({rule.name})")


@app.command("enable")
def enable_rule(
    ctx: typer.Context,
    rule_id: str = typer.Argument(..., help="Rule ID"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Enable a rule."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    run(runtime.rules.update_rule(tenant_id, rule_id, {"enabled": True}))
    console.print(f"[green]Enabled[/green] {rule_id}")


@app.command("disable")
def disable_rule(
    ctx: typer.Context,
    rule_id: str = typer.Argument(..., help="Rule ID"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Disable a rule without deleting it."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    run(runtime.rules.update_rule(tenant_id, rule_id, {"enabled": False}))
    console.print(f"[yellow]Disabled[/yellow] {rule_id}")


@app.command("delete")
def delete_rule(
    ctx: typer.Context,
    rule_id: str = typer.Argument(..., help="Rule ID"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant id"),
):
    """Delete a rule."""
    tenant_id = require_tenant(ctx, tenant)
    runtime = build_cli_runtime(ctx)
    run(runtime.rules.delete_rule(tenant_id, rule_id))
    console.print(f"[green]Deleted[/green] {rule_id}")
