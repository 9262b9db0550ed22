"""MCP (Model Context Protocol) server commands: serve."""

from __future__ import annotations

import click

from ._common import CONFIG_HOME, load_or_exit


def register_mcp_commands(main: click.Group) -> None:
    """Register the serve command."""

    @main.command("serve")
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def serve(home: str):
        """Start the MCP server on stdio transport.

        Exposes cyberlink create/update/delete, contract queries,
        transaction status, wallet balance and embedding tools.

        For Claude Desktop: add to claude_desktop_config.json.
        For Cursor: configure in .cursor/mcp.json.
        """
        from ..mcp_server import main as mcp_main

        mcp_main(load_or_exit(home))
