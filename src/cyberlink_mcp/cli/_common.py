"""Shared helpers for the CLI command modules."""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Awaitable, Callable, Optional

from rich.console import Console

from .. import CONFIG_HOME
from ..config import ServerConfig, load_config
from ..errors import ConfigError, CyberlinkError
from ..mcp_server import ToolFacade, build_facade
from ..sanitize import sanitize_result

console = Console()
err_console = Console(stderr=True)


def load_or_exit(home: Optional[str] = None) -> ServerConfig:
    """Load configuration, exiting with status 1 when it is invalid."""
    try:
        return load_config(home=home)
    except ConfigError as exc:
        err_console.print(f"[bold red]Configuration error:[/] {exc}")
        sys.exit(1)


def run_with_facade(
    home: Optional[str],
    action: Callable[[ToolFacade], Awaitable[Any]],
) -> Any:
    """Connect the gateways, run one action, and print its result as JSON.

    Exits with status 1 on configuration or ledger errors.
    """
    config = load_or_exit(home)

    async def _run() -> Any:
        facade = await build_facade(config, with_embeddings=False)
        return await action(facade)

    try:
        result = asyncio.run(_run())
    except CyberlinkError as exc:
        label = "Configuration error" if isinstance(exc, ConfigError) else "Error"
        err_console.print(f"[bold red]{label}:[/] {exc}")
        sys.exit(1)
    console.print_json(data=sanitize_result(result))
    return result
