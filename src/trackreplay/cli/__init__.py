"""Command line entry points for trackreplay."""

from trackreplay.cli.app import main, run_cli
from trackreplay.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
