"""
recall graph - Interactive map of repositories and the tools used in them.

Renders the repo/tool usage graph served by a recall backend as a
continuously simulated force-directed layout.

Key Components:
- core: Payload types shared with the backend
- graph: Data model, physics, camera, interaction and rendering
- cli: Command line entry points

Usage:
    from recall.graph import GraphView, FileGraphSource

    view = GraphView(FileGraphSource("graph.json"), width=1200, height=800)
    view.load()
    view.run_frames(300)
    view.surface.save("graph.png")
"""

__version__ = "0.3.0"
