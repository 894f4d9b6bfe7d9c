"""Scheduler command - Inspect and run scheduler jobs."""

import typer
from rich.table import Table

from ringrules.api.cli.context import build_cli_runtime, console, run
from ringrules.core.domain.schedule import RunResult

app = typer.Typer(help="Scheduler jobs")


@app.command("status")
def status(ctx: typer.Context):
    """List jobs with their intervals."""
    runtime = build_cli_runtime(ctx)
    table = Table(title="Scheduler Jobs")
    table.add_column("Job", style="cyan")
    table.add_column("Interval", style="white")
    table.add_column("Description", style="dim")
    for job_status in runtime.scheduler.status():
        job = job_status.job
        table.add_row(job.name, job.interval_human, job.description)
    console.print(table)


@app.command("run")
def run_job(
    ctx: typer.Context,
    job_name: str = typer.Argument(..., help="Job name, e.g. staleLeadFollowup"),
):
    """Run a job once for every tenant and wait for it to finish."""
    runtime = build_cli_runtime(ctx)
    scheduler = runtime.scheduler

    async def _run():
        result = await scheduler.run_now(job_name)
        await scheduler.join()
        return result, scheduler.get_status(job_name)

    result, job_status = run(_run())
    if result == RunResult.ALREADY_RUNNING:
        console.print(f"[yellow]{job_name} is already running[/yellow]")
        raise typer.Exit(1)
    if job_status.last_error:
        console.print(f"[red]{job_name} finished with errors:[/red] {job_status.last_error}")
        raise typer.Exit(1)
    console.print(f"[green]{job_name} finished[/green]")
