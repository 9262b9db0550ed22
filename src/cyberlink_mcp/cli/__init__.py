"""
cyberlink-mcp CLI.

Command groups live in their own modules and are registered on the main
Click group here.

Entry point: cyberlink_mcp.cli:main
"""

from __future__ import annotations

import logging

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="cyberlink-mcp")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
def main(verbose: bool):
    """cyberlink-mcp: CW-Social cyberlinks as MCP tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .mcp_cmd import register_mcp_commands
from .config_cmd import register_config_commands
from .query_cmd import register_query_commands

register_mcp_commands(main)
register_config_commands(main)
register_query_commands(main)
