"""Configuration commands: config show, config check."""

from __future__ import annotations

import sys

import click
from rich.table import Table

from ..errors import ConfigError
from ._common import CONFIG_HOME, console, err_console, load_or_exit


def register_config_commands(main: click.Group) -> None:
    """Register the config command group."""

    @main.group()
    def config():
        """Inspect the server configuration."""

    @config.command("show")
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def config_show(home: str):
        """Show the merged configuration (mnemonic masked)."""
        cfg = load_or_exit(home)

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Setting", style="bold")
        table.add_column("Value", style="cyan")
        for key, value in cfg.redacted().items():
            if isinstance(value, list):
                value = ", ".join(value)
            table.add_row(key, "" if value is None else str(value))
        console.print(table)

        mode = "signing" if cfg.signing_enabled else "message-only (no WALLET_MNEMONIC)"
        console.print(f"\n[bold]Write mode:[/] {mode}")

    @config.command("check")
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def config_check(home: str):
        """Exit non-zero when required settings are missing."""
        cfg = load_or_exit(home)
        try:
            cfg.validate_required()
        except ConfigError as exc:
            err_console.print(f"[bold red]{exc}[/]")
            sys.exit(1)
        console.print("[bold green]Configuration OK[/]")
