"""Command line interface for covtree."""

from covtree.cli.root import cli, create_app, main

__all__ = ["cli", "create_app", "main"]
