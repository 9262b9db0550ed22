"""
cyberlink-mcp: CW-Social cyberlinks as Model Context Protocol tools.

Create, read, update and delete cyberlinks on a CosmWasm contract from any
MCP client that speaks stdio. Writes are submitted and confirmed on-chain;
reads go straight to the contract.
"""

import os

__version__ = "0.1.0"

CONFIG_HOME = os.environ.get("CYBERLINK_MCP_HOME", "~/.cyberlink-mcp")
