"""
Graph Command - Open the interactive repo/tool graph.

Opens a live window by default, or renders a PNG snapshot / prints the
settled layout as JSON for scripting.
"""

import json
import random
import sys
from pathlib import Path
from typing import Optional

import click

from ...config import load_config
from ...graph.interaction import DrillDownRequest
from ...graph.view import GraphView
from ..utils import echo_error, echo_info, echo_success, resolve_source


def layout_to_dict(view: GraphView) -> dict:
    """Serializable snapshot of node positions and edges."""
    model = view.model
    return {
        "nodes": [
            {
                "id": n.id,
                "label": n.label,
                "type": str(n.kind),
                "x": round(n.x, 2),
                "y": round(n.y, 2),
                "radius": round(n.radius, 2),
            }
            for n in model.nodes
        ],
        "edges": [
            {
                "source": model.nodes[e.source_index].id,
                "target": model.nodes[e.target_index].id,
                "type": str(e.kind),
                "weight": e.weight,
            }
            for e in model.edges
        ],
        "settled": view.physics.settled,
    }


@click.command()
@click.option("--url", help="recall server base URL (default: from config)")
@click.option("-i", "--input", "graph_file", type=click.Path(exists=True, dir_okay=False),
              help="Read the graph payload from a JSON file")
@click.option("-o", "--snapshot", type=click.Path(dir_okay=False),
              help="Render to a PNG file instead of opening a window")
@click.option("--frames", default=600, show_default=True, help="Maximum frames to simulate for --snapshot/--json")
@click.option("--json", "json_mode", is_flag=True, help="Print the settled layout as JSON to stdout")
@click.option("--width", type=int, help="Viewport width in pixels")
@click.option("--height", type=int, help="Viewport height in pixels")
@click.option("--seed", type=int, help="Random seed for a reproducible layout")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Config file (default: ~/.recall/config.yaml)")
def graph(
    url: Optional[str],
    graph_file: Optional[str],
    snapshot: Optional[str],
    frames: int,
    json_mode: bool,
    width: Optional[int],
    height: Optional[int],
    seed: Optional[int],
    config_path: Optional[Path],
):
    """
    Visualize repositories and the tools used in them.
    """
    config = load_config(config_path)
    source = resolve_source(url, graph_file, config)
    width = width or config.width
    height = height or config.height
    seed = seed if seed is not None else config.seed

    if not snapshot and not json_mode:
        _open_window(source, width, height, config.frame_interval_ms, seed)
        return

    view = GraphView(source, width=width, height=height, rng=random.Random(seed))
    if not view.load():
        if json_mode:
            click.echo(json.dumps({
                "meta": {"status": "error"},
                "error": {"message": str(view.last_error)},
            }))
        else:
            echo_error(f"Failed to load graph: {view.last_error}")
        sys.exit(1)

    ran = view.settle(frames)

    if json_mode:
        click.echo(json.dumps({
            "meta": {"status": "success", "frames": ran},
            "data": layout_to_dict(view),
        }))
        return

    output_path = Path(snapshot)
    view.render()
    view.surface.save(output_path)
    echo_success(f"Rendered: {output_path}")
    echo_info(view.status)
    state = "settled" if view.physics.settled else "still moving"
    echo_info(f"Layout {state} after {ran} frames")


def _open_window(source, width: int, height: int, frame_interval_ms: int, seed: Optional[int]) -> None:
    try:
        from ...graph.window import GraphWindow
    except ImportError as e:
        echo_error(f"Interactive window unavailable ({e}). Use --snapshot or --json instead.")
        sys.exit(1)

    def on_drill_down(request: DrillDownRequest) -> None:
        echo_info(f"{request.kind}: {request.label}")

    window = GraphWindow(
        source,
        width=width,
        height=height,
        frame_interval_ms=frame_interval_ms,
        on_drill_down=on_drill_down,
        seed=seed,
    )
    window.run()
