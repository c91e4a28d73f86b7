"""HealthScan admin CLI entry point."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from healthscan_admin.config.models import HealthScanConfig

app = typer.Typer(
    name="healthscan",
    help="HealthScan admin: server health and database stats",
    no_args_is_help=True,
)
console = Console()

PathOption = typer.Option(None, "--path", "-p", help="Path to .healthscan.yaml")

BADGE_STYLES = {
    "Healthy": "green",
    "Fallback Mode": "yellow",
    "Unhealthy": "red",
    "Unknown": "dim",
}


def _load(path: Path | None) -> HealthScanConfig:
    from healthscan_admin.config.loader import load_config

    try:
        return load_config(path=path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


@app.command()
def status(
    path: Path | None = PathOption,
    timeout: float | None = typer.Option(None, help="Per-attempt timeout in seconds"),
) -> None:
    """Probe the backend and show its health."""
    from healthscan_admin.server.manager import ServerHealthManager
    from healthscan_admin.server.notices import describe_failure, status_badge

    config = _load(path)
    manager = ServerHealthManager(config)
    result = manager.check_health_sync(timeout=timeout)

    badge = status_badge(result)
    style = BADGE_STYLES[badge]
    console.print(f"[bold]Server:[/bold] {manager.client.base_url}")
    console.print(f"[bold]Status:[/bold] [{style}]{badge}[/{style}]")
    if result.healthy:
        console.print(f"[bold]Response time:[/bold] {result.response_time_ms}ms")
        return

    notice = describe_failure(result)
    console.print(f"[red]{result.error}[/red]")
    if notice is not None:
        console.print(f"[yellow]{notice.title}:[/yellow] {notice.message}")
        console.print(f"Suggested action: [bold]{notice.action}[/bold]")
    raise typer.Exit(1)


@app.command()
def stats(path: Path | None = PathOption) -> None:
    """Show aggregate database statistics."""
    from healthscan_admin.server.manager import ServerHealthManager

    config = _load(path)
    manager = ServerHealthManager(config)
    result = manager.fetch_stats_sync()

    table = Table(title="Database Statistics")
    table.add_column("Category", style="bold")
    table.add_column("Records", justify="right")
    for category, count in sorted(result.category_breakdown.items()):
        table.add_row(category, str(count))
    console.print(table)

    console.print(f"Total records: {result.total_records}")
    console.print(f"Recent activity: {result.recent_activity}")
    console.print(f"Data quality: {result.data_quality}%")
    if result.is_fallback:
        console.print("[yellow]! Stats unavailable, showing fallback data[/yellow]")


@app.command()
def diagnose(path: Path | None = PathOption) -> None:
    """Run the server diagnostic suite."""
    from healthscan_admin.server.diagnostics import run_diagnostics

    config = _load(path)
    report = asyncio.run(run_diagnostics(config))

    icons = {"pass": "[green]✓[/green]", "fail": "[red]✗[/red]", "warning": "[yellow]![/yellow]"}
    for category, results in report.by_category().items():
        console.print(f"[bold]{category}[/bold]")
        for r in results:
            console.print(f"  {icons[r.status]} {r.test}: {r.message}")
            if r.details:
                console.print(f"    [dim]{r.details}[/dim]")
            if r.solution:
                console.print(f"    [blue]Solution:[/blue] {r.solution}")

    console.print(
        f"\n{report.count('pass')} passed, {report.count('fail')} failed, {report.count('warning')} warnings"
    )
    if report.success:
        console.print("[green bold]All diagnostic tests passed.[/green bold]")
    else:
        console.print("[red bold]Critical issues found. Server functionality may be impaired.[/red bold]")
        raise typer.Exit(1)


@app.command()
def monitor(
    path: Path | None = PathOption,
    interval: float | None = typer.Option(None, min=0.01, help="Seconds between checks"),
    cycles: int = typer.Option(0, help="Stop after this many intervals (0 = run until interrupted)"),
) -> None:
    """Keep probing the backend in the background, printing each status change."""
    from healthscan_admin.server.manager import ServerHealthManager
    from healthscan_admin.server.monitor import HealthMonitor
    from healthscan_admin.server.notices import status_badge

    config = _load(path)
    manager = ServerHealthManager(config)
    every = config.health.monitor_interval if interval is None else interval

    async def _watch() -> None:
        health_monitor = HealthMonitor(manager)
        first = await manager.check_health()
        console.print(f"Initial status: {status_badge(first)}")
        health_monitor.start(every)
        last = manager.server_status()
        count = 0
        try:
            while not cycles or count < cycles:
                await asyncio.sleep(every)
                count += 1
                current = manager.server_status()
                if current != last:
                    console.print(f"Status changed: {last} → {current}")
                    last = current
        finally:
            await health_monitor.stop()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\nStopped.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8000, help="Bind port"),
) -> None:
    """Start the status API server."""
    import uvicorn

    console.print(f"[bold]HealthScan Admin[/bold] starting on http://{host}:{port}")
    uvicorn.run("healthscan_admin.api.app:app", host=host, port=port, reload=False)


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("validate")
def config_validate(path: Path | None = PathOption) -> None:
    """Validate configuration file."""
    from urllib.parse import urlparse

    import yaml

    from healthscan_admin.config.loader import read_config

    try:
        config, unresolved = read_config(path=path)
        console.print("[green]✓[/green] YAML parses correctly")
        console.print("[green]✓[/green] Pydantic validation passes")
    except FileNotFoundError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)
    except yaml.YAMLError as exc:
        console.print(f"[red]✗ YAML parsing failed: {exc}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print("[green]✓[/green] YAML parses correctly")
        console.print(f"[red]✗ Pydantic validation failed: {exc}[/red]")
        raise typer.Exit(1)

    errors: list[str] = [str(var) for var in unresolved]
    warnings: list[str] = []
    backend = config.backend

    if not backend.project_id and not backend.base_url:
        errors.append("backend: either project_id or base_url must be set")
    else:
        parsed = urlparse(backend.resolved_base_url)
        if not parsed.scheme or not parsed.netloc:
            errors.append(f"backend: invalid base URL '{backend.resolved_base_url}'")

    if not backend.anon_key:
        errors.append("backend: anon_key is empty")

    for name in ("ping_endpoint", "health_endpoint", "stats_endpoint", "fallback_stats_endpoint"):
        if not getattr(backend, name).startswith("/"):
            errors.append(f"backend: {name} must start with '/'")

    if config.retry.max_delay < config.retry.base_delay:
        warnings.append("retry: max_delay is smaller than base_delay")

    if errors:
        for err in errors:
            console.print(f"[red]✗ {err}[/red]")
        console.print(f"\n[red bold]{len(errors)} validation error(s) found.[/red bold]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Backend URL is valid: {backend.resolved_base_url}")
    for w in warnings:
        console.print(f"[yellow]! {w}[/yellow]")
    console.print("\n[green bold]Configuration is valid.[/green bold]")


@config_app.command("show")
def config_show(path: Path | None = PathOption) -> None:
    """Print resolved configuration."""
    config = _load(path)
    backend = config.backend

    console.print("[bold]Backend:[/bold]")
    console.print(f"  URL: {backend.resolved_base_url}")
    console.print(f"  Anon key: {'set' if backend.anon_key else 'missing'}")
    console.print(f"  Ping: {backend.ping_endpoint}  Health: {backend.health_endpoint}")
    console.print(f"  Stats: {backend.stats_endpoint}  Fallback stats: {backend.fallback_stats_endpoint}\n")

    console.print("[bold]Health:[/bold]")
    console.print(f"  Cache TTL: {config.health.cache_ttl_seconds:g}s")
    console.print(f"  Timeouts: health {config.health.timeout:g}s, stats {config.health.stats_timeout:g}s")
    console.print(f"  Monitor interval: {config.health.monitor_interval:g}s\n")

    console.print("[bold]Retry:[/bold]")
    console.print(
        f"  {config.retry.max_retries} attempts, "
        f"backoff {config.retry.base_delay:g}s doubling up to {config.retry.max_delay:g}s"
    )


def main() -> None:
    app()
