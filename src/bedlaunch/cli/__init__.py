"""Command-line interface for bedlaunch."""

from bedlaunch.cli.cli import app, main

__all__ = ["app", "main"]
