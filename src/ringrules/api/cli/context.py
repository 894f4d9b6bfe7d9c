"""Shared helpers for CLI commands: runtime construction and error output."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from rich.console import Console

from ringrules.application.config_loader import load_config
from ringrules.application.runtime_builder import AutomationRuntime, build_runtime
from ringrules.core.domain.errors import RingrulesError
from ringrules.core.utils.log_setup import configure_logging

console = Console()
T = TypeVar("T")


def build_cli_runtime(ctx: typer.Context) -> AutomationRuntime:
    """Load configuration from the global ``--config`` option and build the runtime."""
    opts = ctx.obj or {}
    try:
        config = load_config(opts.get("config"))
    except RingrulesError as exc:
        console.print(f"[red]{exc.message}[/red]")
        for error in (exc.details or {}).get("errors", []):
            console.print(f"  [red]{error['field']}: {error['message']}[/red]")
        raise typer.Exit(1) from exc
    configure_logging("DEBUG" if opts.get("debug") else "WARNING")
    return build_runtime(config)


def require_tenant(ctx: typer.Context, tenant: str | None = None) -> str:
    """Tenant from the command option, falling back to the global ``--tenant``."""
    tenant = tenant or (ctx.obj or {}).get("tenant")
    if not tenant:
        console.print("[red]A tenant is required (--tenant or RINGRULES_TENANT)[/red]")
        raise typer.Exit(1)
    return tenant


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, printing domain errors and exiting non-zero."""
    try:
        return asyncio.run(coro)
    except RingrulesError as exc:
        console.print(f"[red]{exc.code}: {exc.message}[/red]")
        raise typer.Exit(1) from exc
