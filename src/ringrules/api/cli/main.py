"""ringrules CLI entry point."""

import typer
from rich.console import Console

from ringrules.api.cli.commands import catalog, events, logs, rules, scheduler

app = typer.Typer(
    name="ringrules",
    help="ringrules - tenant automation rules and job scheduler",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Register command groups
app.add_typer(rules.app, name="rules", help="Rule management")
app.add_typer(logs.app, name="logs", help="Execution log")
app.add_typer(catalog.app, name="catalog", help="Events, actions and templates")
app.add_typer(events.app, name="events", help="Publish events")
app.add_typer(scheduler.app, name="scheduler", help="Scheduler jobs")


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="RINGRULES_CONFIG", help="YAML config file"
    ),
    tenant: str | None = typer.Option(
        None, "--tenant", "-t", envvar="RINGRULES_TENANT", help="Tenant to operate on"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """ringrules operator CLI."""
    # Store global options in context for subcommands
    ctx.obj = {"config": config, "tenant": tenant, "debug": debug}


@app.command()
def version():
    """Show ringrules version."""
    from ringrules import __version__

    console.print(f"[bold blue]Version:[/bold blue] [cyan]{__version__}[/cyan]")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8070, "--port", help="Bind port"),
):
    """Run the management API server."""
    import uvicorn

    uvicorn.run("ringrules.api.server:app", host=host, port=port)


if __name__ == "__main__":
    app()
