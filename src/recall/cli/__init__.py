"""Command line interface for recall graph."""
