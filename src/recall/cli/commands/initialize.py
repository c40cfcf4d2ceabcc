"""
Init Command - Viewer configuration bootstrap.

This module handles the `recall init` command, which writes the ``graph:``
section of ~/.recall/config.yaml and optionally checks that the recall
server answers.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from ...config import DEFAULT_SERVER_URL, GraphConfig, default_config_path, write_config
from ...graph.loader import GraphLoadError, HttpGraphSource

console = Console()


def check_server(server_url: str, timeout: float) -> Optional[str]:
    """
    Try to fetch the graph from ``server_url``.

    Returns:
        A short summary on success, None if the server could not be used.
    """
    source = HttpGraphSource(server_url, timeout=timeout)
    try:
        payload = source.load()
    except GraphLoadError as e:
        console.print(f"[yellow]Could not reach {source.url}: {e}[/yellow]")
        return None
    return f"{len(payload.nodes)} nodes, {len(payload.edges)} edges"


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
@click.option("--server-url", default=DEFAULT_SERVER_URL, show_default=True,
              help="Address of the recall server")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Config file (default: ~/.recall/config.yaml)")
def init(force: bool, server_url: str, config_path: Optional[Path]):
    """
    Write the viewer configuration.
    """
    console.print(Panel.fit("🚀 [bold blue]recall graph setup[/bold blue]", border_style="blue"))

    config_file = config_path or default_config_path()
    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
        if not Confirm.ask("Do you want to overwrite it?"):
            console.print("Aborted.")
            return

    config = GraphConfig(server_url=server_url.rstrip("/"))

    if Confirm.ask(f"Check that the server at {config.server_url} is reachable?", default=True):
        with console.status("[bold green]Contacting server...[/bold green]"):
            summary = check_server(config.server_url, config.request_timeout)
        if summary:
            console.print(f"✅ Server answered: [cyan]{summary}[/cyan]")

    written = write_config(config, config_file)

    console.print("\n✨ [bold green]Initialized successfully![/bold green]")
    console.print(f"   Config created at: [dim]{written}[/dim]")
    console.print("   Next: [bold cyan]recall graph[/bold cyan]")
