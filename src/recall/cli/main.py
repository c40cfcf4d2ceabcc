"""
recall graph CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import graph, initialize
from .utils import configure_logging


@click.group()
@click.version_option(package_name="recall-graph")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """recall graph: see which repos and tools your shell history connects.

    \b
    Quick Start:
      recall init
      recall graph
      recall graph --input graph.json --snapshot graph.png
    """
    configure_logging(verbose)


# Register commands
main.add_command(graph.graph)
main.add_command(initialize.init)

if __name__ == "__main__":
    main()
