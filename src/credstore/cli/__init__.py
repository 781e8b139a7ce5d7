"""Command-line interface."""

from .cli import cli, main, run_menu

__all__ = ["cli", "main", "run_menu"]
