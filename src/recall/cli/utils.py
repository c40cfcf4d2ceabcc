"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing, logging setup and graph source resolution used by the
individual commands.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.logging import RichHandler

from ..config import GraphConfig
from ..graph.loader import FileGraphSource, GraphSource, HttpGraphSource


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG with --verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )


def resolve_source(url: Optional[str], graph_file: Optional[str], config: GraphConfig) -> GraphSource:
    """
    Pick the payload source: an explicit file wins, then an explicit URL,
    then the configured server.
    """
    if graph_file:
        return FileGraphSource(Path(graph_file))
    return HttpGraphSource(url or config.server_url, timeout=config.request_timeout)
