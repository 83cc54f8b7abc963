"""CLI router and output rendering."""

from capital.ui.cli import CLIError, build_parser, run_cli
from capital.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "run_cli"]
