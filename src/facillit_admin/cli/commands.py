"""CLI commands for the admin console.

Commands:
- serve: Run the Web API with uvicorn
- catalog: Show the achievement metric catalog and icon set
- check-config: Validate configuration without starting the server
"""

import typer
from rich.console import Console
from rich.table import Table

from facillit_admin.config.app_config import ConfigError, load_app_config
from facillit_admin.core.achievements import target_input_for
from facillit_admin.core.catalog import METRIC_CATALOG, IconName

app = typer.Typer(
    name="facillit-admin",
    help="Administrative console API for the Facillit platform.",
    no_args_is_help=True,
)

console = Console()


def _load_config_or_exit():
    """Load config, or exit with the missing variables listed."""
    try:
        return load_app_config()
    except ConfigError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int = typer.Option(None, "--port", help="Bind port (default from config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    config = _load_config_or_exit()
    bind_host = host or config.server.host
    bind_port = port or config.server.port

    console.print(f"[green]✓ Facillit Admin em http://{bind_host}:{bind_port}[/green]")
    uvicorn.run(
        "facillit_admin.web.api:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
    )


@app.command()
def catalog() -> None:
    """Show the metric catalog and the icon set."""
    table = Table(title="Métricas de conquistas")
    table.add_column("key", style="bold")
    table.add_column("label")
    table.add_column("tipo")
    table.add_column("unidade")
    table.add_column("meta")

    for metric in METRIC_CATALOG:
        widget = target_input_for(metric)
        target = "0 / 1" if widget.kind == "binary" else f">= {widget.minimum}"
        type_color = "magenta" if metric.is_boolean else "cyan"
        table.add_row(
            metric.key,
            metric.label,
            f"[{type_color}]{metric.type.value}[/{type_color}]",
            metric.unit,
            target,
        )

    console.print(table)
    console.print(f"\n[bold]Ícones ({len(IconName)}):[/bold] " + ", ".join(i.value for i in IconName))


@app.command(name="check-config")
def check_config() -> None:
    """Validate configuration (the key is shown masked)."""
    config = _load_config_or_exit()

    console.print("[green]✓ Configuração válida[/green]")
    console.print(f"  [dim]backend:[/dim]  {config.backend.url}")
    console.print(f"  [dim]key:[/dim]      {config.backend.masked_key()}")
    console.print(f"  [dim]bucket:[/dim]   {config.storage.bucket}/{config.storage.cover_prefix}")
    console.print(f"  [dim]entrada:[/dim]  {config.gate.entry_route}")


if __name__ == "__main__":
    app()
