"""
cyberlink-mcp server: CW-Social cyberlinks via Model Context Protocol.

Works with any MCP client that speaks stdio (Claude Desktop, Cursor,
Windsurf, Cline, ...).

Tools:
    create_cyberlink            - Create one cyberlink
    create_named_cyberlink      - Create a cyberlink under a name
    create_cyberlinks           - Create several cyberlinks in one transaction
    create_cyberlink2           - Create a node and a link to it together
    update_cyberlink            - Replace a cyberlink's fields
    update_cyberlink_embedding  - Embed a cyberlink's content and store the vector
    delete_cyberlink            - Delete a cyberlink
    update_admins               - Replace the contract admin list
    update_executors            - Replace the contract executor list
    send_tokens                 - Transfer tokens from the server wallet
    query_by_id / query_by_ids / query_by_formatted_id
    query_cyberlinks / query_named_cyberlinks
    query_by_owner / query_by_type / query_by_from / query_by_to
    query_by_owner_and_type / query_by_time_range / query_by_time_range_any
    query_last_id / query_config / query_debug_state / query_graph_stats
    query_tx_status             - Settlement state of a transaction hash
    query_wallet_balance        - Server wallet address and balance
    semantic_similarity         - Cosine similarity of two texts

Without WALLET_MNEMONIC every write tool returns the built, unsent message
so an external signer can broadcast it.

Invocation (all equivalent):
    cyberlink-mcp serve
    python -m cyberlink_mcp.mcp_server

Client configuration (Claude Desktop, Cursor .cursor/mcp.json, ...):
    {"mcpServers": {"cyberlink": {
        "command": "cyberlink-mcp", "args": ["serve"],
        "env": {"NODE_URL": "rest+http://localhost:1317",
                "CHAIN_ID": "testing",
                "CONTRACT_ADDRESS": "wasm1...",
                "WALLET_MNEMONIC": "..."}}}}
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    ErrorData,
    TextContent,
    Tool,
)
from pydantic import ValidationError

from . import __version__
from .config import ServerConfig, load_config
from .embedding import EmbeddingService
from .errors import ConfigError, CyberlinkError
from .ledger import CosmpyLedger
from .messages import MessageBuilder, value_fields
from .models import CyberlinkState, ProgressState
from .pagination import DEFAULT_LIMIT
from .query import QueryGateway
from .responses import (
    execute_or_just_msg,
    format_query_response,
    format_tx_response,
    json_response,
)
from .tx import TransactionGateway

logger = logging.getLogger("cyberlink_mcp.mcp")

Handler = Callable[[dict], Awaitable[list[TextContent]]]


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


def _arg(args: dict, *names: str, required: bool = True) -> Any:
    """First present argument among ``names``; later names are deprecated aliases."""
    for name in names:
        value = args.get(name)
        if value is not None and value != "":
            if name != names[0]:
                logger.warning("Argument '%s' is deprecated; use '%s'", name, names[0])
            return value
    if required:
        raise _error(INVALID_PARAMS, f"{names[0]} is required")
    return None


def _int_arg(args: dict, *names: str) -> int:
    value = _arg(args, *names)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise _error(INVALID_PARAMS, f"{names[0]} must be an integer") from None


def _list_arg(args: dict, *names: str) -> list:
    value = _arg(args, *names)
    if not isinstance(value, list):
        raise _error(INVALID_PARAMS, f"{names[0]} must be an array")
    return value


# ═══════════════════════════════════════════════════════════
# Tool Definitions
# ═══════════════════════════════════════════════════════════

_CYBERLINK_PROPS = {
    "type": {"type": "string", "description": "Type of the cyberlink"},
    "from": {"type": "string", "description": "Source of the cyberlink (fid)"},
    "to": {"type": "string", "description": "Target of the cyberlink (fid)"},
    "value": {
        "type": ["string", "object"],
        "description": "Value: a string, or an object with content/embedding/tags",
    },
}

_CYBERLINK_SCHEMA = {
    "type": "object",
    "properties": _CYBERLINK_PROPS,
    "required": ["type"],
}

_PAGINATION_PROPS = {
    "start_after": {
        "type": ["integer", "string"],
        "description": "Start cursor for pagination",
    },
    "limit": {
        "type": "integer",
        "description": "Maximum number of results (1-100)",
        "default": DEFAULT_LIMIT,
    },
}

_TIME_RANGE_PROPS = {
    "owner": {"type": "string", "description": "Owner address to filter by"},
    "start_time": {
        "type": ["integer", "string"],
        "description": "Range start: ISO-8601 datetime or nanosecond timestamp",
    },
    "end_time": {
        "type": ["integer", "string"],
        "description": "Range end: ISO-8601 datetime or nanosecond timestamp",
    },
    **_PAGINATION_PROPS,
}

_GID = {"type": "integer", "description": "Numeric ID (gid) of the cyberlink"}


def _schema(properties: Optional[dict] = None, required: Optional[list] = None) -> dict:
    return {"type": "object", "properties": properties or {}, "required": required or []}


def build_tools(denom: str = "stake") -> list[Tool]:
    """Tool declarations advertised to MCP clients."""
    return [
        # -- writes ---------------------------------------------------------
        Tool(
            name="create_cyberlink",
            description=(
                "Create a new cyberlink and wait for confirmation. Returns "
                "transaction details including gid and fid."
            ),
            inputSchema=_schema(_CYBERLINK_PROPS, ["type"]),
        ),
        Tool(
            name="create_named_cyberlink",
            description="Create a named cyberlink and wait for confirmation.",
            inputSchema=_schema(
                {
                    "name": {"type": "string", "description": "Name of the cyberlink"},
                    "cyberlink": _CYBERLINK_SCHEMA,
                },
                ["name", "cyberlink"],
            ),
        ),
        Tool(
            name="create_cyberlinks",
            description=(
                "Create multiple cyberlinks in one transaction. Returns gids "
                "and fids of the batch."
            ),
            inputSchema=_schema(
                {"cyberlinks": {"type": "array", "items": _CYBERLINK_SCHEMA}},
                ["cyberlinks"],
            ),
        ),
        Tool(
            name="create_cyberlink2",
            description=(
                "Create a node and a link attached to it in one transaction. "
                "The link connects the new node to an existing cyberlink."
            ),
            inputSchema=_schema(
                {
                    "node_type": {"type": "string", "description": "Type of the new node"},
                    "node_value": {
                        "type": ["string", "object"],
                        "description": "Value of the new node",
                    },
                    "link_type": {"type": "string", "description": "Type of the link"},
                    "link_value": {
                        "type": ["string", "object"],
                        "description": "Value of the link",
                    },
                    "link_from_existing_gid": {
                        "type": "integer",
                        "description": "Existing cyberlink the link starts from",
                    },
                    "link_to_existing_gid": {
                        "type": "integer",
                        "description": "Existing cyberlink the link points to",
                    },
                },
                ["node_type", "link_type"],
            ),
        ),
        Tool(
            name="update_cyberlink",
            description="Update an existing cyberlink and wait for confirmation.",
            inputSchema=_schema(
                {
                    "gid": _GID,
                    "id": {"type": "integer", "description": "Deprecated alias of gid"},
                    "cyberlink": _CYBERLINK_SCHEMA,
                },
                ["cyberlink"],
            ),
        ),
        Tool(
            name="update_cyberlink_embedding",
            description=(
                "Compute a text embedding for a cyberlink's content (or the "
                "given text) and store it in the cyberlink's value."
            ),
            inputSchema=_schema(
                {
                    "gid": _GID,
                    "text": {
                        "type": "string",
                        "description": "Text to embed (default: the value's content)",
                    },
                },
                ["gid"],
            ),
        ),
        Tool(
            name="delete_cyberlink",
            description="Delete a cyberlink and wait for confirmation.",
            inputSchema=_schema(
                {
                    "gid": _GID,
                    "id": {"type": "integer", "description": "Deprecated alias of gid"},
                },
            ),
        ),
        Tool(
            name="update_admins",
            description="Replace the contract's admin list (admin only).",
            inputSchema=_schema(
                {"new_admins": {"type": "array", "items": {"type": "string"}}},
                ["new_admins"],
            ),
        ),
        Tool(
            name="update_executors",
            description="Replace the contract's executor list (admin only).",
            inputSchema=_schema(
                {"new_executors": {"type": "array", "items": {"type": "string"}}},
                ["new_executors"],
            ),
        ),
        Tool(
            name="send_tokens",
            description="Send tokens from the server wallet to another address.",
            inputSchema=_schema(
                {
                    "recipient": {"type": "string", "description": "Recipient address"},
                    "amount": {
                        "type": "string",
                        "description": "Amount in base units (e.g. '100000')",
                    },
                    "denom": {
                        "type": "string",
                        "description": f"Token denomination (e.g. '{denom}')",
                        "default": denom,
                    },
                },
                ["recipient", "amount"],
            ),
        ),
        # -- point lookups --------------------------------------------------
        Tool(
            name="query_by_id",
            description="Query a cyberlink by its numeric ID (gid).",
            inputSchema=_schema(
                {"gid": _GID, "id": {"type": "integer", "description": "Deprecated alias of gid"}},
            ),
        ),
        Tool(
            name="query_by_ids",
            description="Query multiple cyberlinks by their numeric IDs.",
            inputSchema=_schema(
                {
                    "gids": {"type": "array", "items": {"type": "integer"}},
                    "ids": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Deprecated alias of gids",
                    },
                },
            ),
        ),
        Tool(
            name="query_by_formatted_id",
            description="Query a cyberlink by its formatted string ID (fid).",
            inputSchema=_schema(
                {
                    "fid": {"type": "string", "description": "Formatted ID"},
                    "formatted_id": {
                        "type": "string",
                        "description": "Deprecated alias of fid",
                    },
                },
            ),
        ),
        # -- listings -------------------------------------------------------
        Tool(
            name="query_cyberlinks",
            description="List all cyberlinks with pagination.",
            inputSchema=_schema(_PAGINATION_PROPS),
        ),
        Tool(
            name="query_named_cyberlinks",
            description="List named cyberlinks with pagination.",
            inputSchema=_schema(_PAGINATION_PROPS),
        ),
        Tool(
            name="query_by_owner",
            description="List cyberlinks owned by an address.",
            inputSchema=_schema(
                {"owner": {"type": "string", "description": "Owner address"}, **_PAGINATION_PROPS},
                ["owner"],
            ),
        ),
        Tool(
            name="query_by_type",
            description="List cyberlinks of a given type.",
            inputSchema=_schema(
                {"type": {"type": "string", "description": "Cyberlink type"}, **_PAGINATION_PROPS},
                ["type"],
            ),
        ),
        Tool(
            name="query_by_from",
            description="List cyberlinks starting at a given source (fid).",
            inputSchema=_schema(
                {"from": {"type": "string", "description": "Source fid"}, **_PAGINATION_PROPS},
                ["from"],
            ),
        ),
        Tool(
            name="query_by_to",
            description="List cyberlinks pointing to a given target (fid).",
            inputSchema=_schema(
                {"to": {"type": "string", "description": "Target fid"}, **_PAGINATION_PROPS},
                ["to"],
            ),
        ),
        Tool(
            name="query_by_owner_and_type",
            description="List cyberlinks of a given type owned by an address.",
            inputSchema=_schema(
                {
                    "owner": {"type": "string", "description": "Owner address"},
                    "type": {"type": "string", "description": "Cyberlink type"},
                    **_PAGINATION_PROPS,
                },
                ["owner", "type"],
            ),
        ),
        Tool(
            name="query_by_time_range",
            description="List an owner's cyberlinks created within a time range.",
            inputSchema=_schema(_TIME_RANGE_PROPS, ["owner", "start_time"]),
        ),
        Tool(
            name="query_by_time_range_any",
            description=(
                "List an owner's cyberlinks created or updated within a time range."
            ),
            inputSchema=_schema(_TIME_RANGE_PROPS, ["owner", "start_time"]),
        ),
        # -- contract state -------------------------------------------------
        Tool(
            name="query_last_id",
            description="Query the last assigned cyberlink ID.",
            inputSchema=_schema(),
        ),
        Tool(
            name="query_config",
            description="Query contract configuration (admins and executors).",
            inputSchema=_schema(),
        ),
        Tool(
            name="query_debug_state",
            description="Query the full contract state (admin only).",
            inputSchema=_schema(),
        ),
        Tool(
            name="query_graph_stats",
            description="Count cyberlinks by owner, by type, or both.",
            inputSchema=_schema(
                {
                    "owner": {"type": "string", "description": "Owner address"},
                    "type": {"type": "string", "description": "Cyberlink type"},
                },
            ),
        ),
        Tool(
            name="query_tx_status",
            description=(
                "Look up a transaction by hash: pending, confirmed (with "
                "gid/fid result fields) or failed."
            ),
            inputSchema=_schema(
                {"tx_hash": {"type": "string", "description": "Transaction hash"}},
                ["tx_hash"],
            ),
        ),
        Tool(
            name="query_wallet_balance",
            description="Return the server wallet address and its token balance.",
            inputSchema=_schema(),
        ),
        # -- embeddings -----------------------------------------------------
        Tool(
            name="semantic_similarity",
            description="Cosine similarity of the embeddings of two texts.",
            inputSchema=_schema(
                {
                    "text_a": {"type": "string", "description": "First text"},
                    "text_b": {"type": "string", "description": "Second text"},
                },
                ["text_a", "text_b"],
            ),
        ),
    ]


# ═══════════════════════════════════════════════════════════
# Tool Implementations
# ═══════════════════════════════════════════════════════════


class ToolFacade:
    """Maps each tool name to one gateway call and shapes its response.

    Args:
        query: Read-only gateway.
        builder: Execute-message builder.
        tx: Transaction gateway, or None to return unsent messages.
        embeddings: Loaded embedding service, or None when disabled.
        denom: Default token denomination.
    """

    def __init__(
        self,
        query: QueryGateway,
        builder: Optional[MessageBuilder] = None,
        tx: Optional[TransactionGateway] = None,
        embeddings: Optional[EmbeddingService] = None,
        denom: str = "stake",
    ) -> None:
        self.query = query
        self.builder = builder or MessageBuilder()
        self.tx = tx
        self.embeddings = embeddings
        self.denom = denom
        self._handlers: dict[str, Handler] = {
            "create_cyberlink": self._handle_create_cyberlink,
            "create_named_cyberlink": self._handle_create_named_cyberlink,
            "create_cyberlinks": self._handle_create_cyberlinks,
            "create_cyberlink2": self._handle_create_cyberlink2,
            "update_cyberlink": self._handle_update_cyberlink,
            "update_cyberlink_embedding": self._handle_update_cyberlink_embedding,
            "delete_cyberlink": self._handle_delete_cyberlink,
            "update_admins": self._handle_update_admins,
            "update_executors": self._handle_update_executors,
            "send_tokens": self._handle_send_tokens,
            "query_by_id": self._handle_query_by_id,
            "query_by_ids": self._handle_query_by_ids,
            "query_by_formatted_id": self._handle_query_by_formatted_id,
            "query_cyberlinks": self._handle_query_cyberlinks,
            "query_named_cyberlinks": self._handle_query_named_cyberlinks,
            "query_by_owner": self._handle_query_by_owner,
            "query_by_type": self._handle_query_by_type,
            "query_by_from": self._handle_query_by_from,
            "query_by_to": self._handle_query_by_to,
            "query_by_owner_and_type": self._handle_query_by_owner_and_type,
            "query_by_time_range": self._handle_query_by_time_range,
            "query_by_time_range_any": self._handle_query_by_time_range_any,
            "query_last_id": self._handle_query_last_id,
            "query_config": self._handle_query_config,
            "query_debug_state": self._handle_query_debug_state,
            "query_graph_stats": self._handle_query_graph_stats,
            "query_tx_status": self._handle_query_tx_status,
            "query_wallet_balance": self._handle_query_wallet_balance,
            "semantic_similarity": self._handle_semantic_similarity,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def list_tools(self) -> list[Tool]:
        return build_tools(self.denom)

    async def call_tool(self, name: str, arguments: Optional[dict]) -> list[TextContent]:
        """Dispatch a tool call.

        Write tools report failure inside the returned outcome. Read tools,
        bad arguments and unknown tools raise ``McpError``.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise _error(METHOD_NOT_FOUND, f"Unknown tool: {name}")
        try:
            return await handler(arguments or {})
        except McpError:
            raise
        except ValidationError as exc:
            raise _error(INVALID_PARAMS, f"Invalid arguments for {name}: {exc}") from exc
        except CyberlinkError as exc:
            logger.warning("Tool '%s' failed: %s", name, exc)
            raise _error(INTERNAL_ERROR, str(exc)) from exc
        except Exception as exc:
            logger.exception("Tool '%s' failed", name)
            raise _error(INTERNAL_ERROR, f"{name} failed: {exc}") from exc

    # -- writes ---------------------------------------------------------------

    async def _submit(self, msg: dict) -> list[TextContent]:
        return await execute_or_just_msg(msg, self.tx)

    async def _handle_create_cyberlink(self, args: dict) -> list[TextContent]:
        return await self._submit(self.builder.create_cyberlink(args))

    async def _handle_create_named_cyberlink(self, args: dict) -> list[TextContent]:
        name = _arg(args, "name")
        link = _arg(args, "cyberlink")
        return await self._submit(self.builder.create_named_cyberlink(name, link))

    async def _handle_create_cyberlinks(self, args: dict) -> list[TextContent]:
        links = _list_arg(args, "cyberlinks")
        return await self._submit(self.builder.create_cyberlinks(links))

    async def _handle_create_cyberlink2(self, args: dict) -> list[TextContent]:
        msg = self.builder.create_cyberlink2(
            node_type=_arg(args, "node_type"),
            link_type=_arg(args, "link_type"),
            node_value=args.get("node_value"),
            link_value=args.get("link_value"),
            link_from_existing_gid=args.get("link_from_existing_gid"),
            link_to_existing_gid=args.get("link_to_existing_gid"),
        )
        return await self._submit(msg)

    async def _handle_update_cyberlink(self, args: dict) -> list[TextContent]:
        gid = _int_arg(args, "gid", "id")
        link = _arg(args, "cyberlink")
        return await self._submit(self.builder.update_cyberlink(gid, link))

    async def _handle_update_cyberlink_embedding(self, args: dict) -> list[TextContent]:
        """Embed a cyberlink's content and write the vector back."""
        if self.embeddings is None:
            raise _error(INTERNAL_ERROR, "Embedding service is not enabled")
        gid = _int_arg(args, "gid", "id")

        raw = await self.query.query_by_id(gid)
        if not isinstance(raw, dict) or not raw.get("type"):
            raise _error(INTERNAL_ERROR, f"Cyberlink {gid} not found")
        state = CyberlinkState.model_validate(raw)

        content = value_fields(state.value).get("content")
        text = args.get("text") or (content if isinstance(content, str) else None)
        if not text:
            raise _error(INVALID_PARAMS, f"Cyberlink {gid} has no content to embed")

        vector = await self.embeddings.embed(text)
        link = {
            "type": state.type,
            "from": state.from_,
            "to": state.to,
            "value": self.builder.with_embedding(state.value, vector),
        }
        return await self._submit(self.builder.update_cyberlink(gid, link))

    async def _handle_delete_cyberlink(self, args: dict) -> list[TextContent]:
        return await self._submit(self.builder.delete_cyberlink(_int_arg(args, "gid", "id")))

    async def _handle_update_admins(self, args: dict) -> list[TextContent]:
        return await self._submit(self.builder.update_admins(_list_arg(args, "new_admins")))

    async def _handle_update_executors(self, args: dict) -> list[TextContent]:
        executors = _list_arg(args, "new_executors")
        return await self._submit(self.builder.update_executors(executors))

    async def _handle_send_tokens(self, args: dict) -> list[TextContent]:
        recipient = _arg(args, "recipient")
        amount = str(_arg(args, "amount"))
        denom = args.get("denom") or self.denom
        if self.tx is None:
            return json_response(self.builder.send_tokens(recipient, amount, denom))
        return format_tx_response(await self.tx.send_tokens(recipient, amount, denom))

    # -- reads ----------------------------------------------------------------

    async def _handle_query_by_id(self, args: dict) -> list[TextContent]:
        return format_query_response(await self.query.query_by_id(_int_arg(args, "gid", "id")))

    async def _handle_query_by_ids(self, args: dict) -> list[TextContent]:
        gids = _list_arg(args, "gids", "ids")
        try:
            gids = [int(g) for g in gids]
        except (TypeError, ValueError):
            raise _error(INVALID_PARAMS, "gids must be integers") from None
        return format_query_response(await self.query.query_by_ids(gids))

    async def _handle_query_by_formatted_id(self, args: dict) -> list[TextContent]:
        fid = _arg(args, "fid", "formatted_id")
        return format_query_response(await self.query.query_by_formatted_id(fid))

    async def _handle_query_cyberlinks(self, args: dict) -> list[TextContent]:
        result = await self.query.query_cyberlinks(
            args.get("start_after"), args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_named_cyberlinks(self, args: dict) -> list[TextContent]:
        result = await self.query.query_named_cyberlinks(
            args.get("start_after"), args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_owner(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_owner(
            _arg(args, "owner"), args.get("start_after"), args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_type(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_type(
            _arg(args, "type"), args.get("start_after"), args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_from(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_from(
            _arg(args, "from"), args.get("start_after"), args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_to(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_to(
            _arg(args, "to"), args.get("start_after"), args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_owner_and_type(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_owner_and_type(
            _arg(args, "owner"),
            _arg(args, "type"),
            args.get("start_after"),
            args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_time_range(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_time_range(
            _arg(args, "owner"),
            _arg(args, "start_time"),
            args.get("end_time"),
            args.get("start_after"),
            args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_by_time_range_any(self, args: dict) -> list[TextContent]:
        result = await self.query.query_by_time_range_any(
            _arg(args, "owner"),
            _arg(args, "start_time"),
            args.get("end_time"),
            args.get("start_after"),
            args.get("limit", DEFAULT_LIMIT),
        )
        return format_query_response(result)

    async def _handle_query_last_id(self, _args: dict) -> list[TextContent]:
        return format_query_response(await self.query.query_last_id())

    async def _handle_query_config(self, _args: dict) -> list[TextContent]:
        return format_query_response(await self.query.query_config())

    async def _handle_query_debug_state(self, _args: dict) -> list[TextContent]:
        return format_query_response(await self.query.query_debug_state())

    async def _handle_query_graph_stats(self, args: dict) -> list[TextContent]:
        result = await self.query.query_graph_stats(args.get("owner"), args.get("type"))
        return format_query_response(result)

    async def _handle_query_tx_status(self, args: dict) -> list[TextContent]:
        tx_hash = _arg(args, "tx_hash", "transaction_hash")
        return json_response(await self.query.tx_status(tx_hash))

    async def _handle_query_wallet_balance(self, _args: dict) -> list[TextContent]:
        if self.tx is None:
            raise _error(INTERNAL_ERROR, "No signing wallet configured")
        return json_response(await self.tx.query_wallet_balance())

    async def _handle_semantic_similarity(self, args: dict) -> list[TextContent]:
        if self.embeddings is None:
            raise _error(INTERNAL_ERROR, "Embedding service is not enabled")
        text_a = _arg(args, "text_a")
        text_b = _arg(args, "text_b")
        a = await self.embeddings.embed(text_a)
        b = await self.embeddings.embed(text_b)
        return json_response({"similarity": self.embeddings.similarity(a, b)})


# ═══════════════════════════════════════════════════════════
# Wiring
# ═══════════════════════════════════════════════════════════


def create_server(facade: ToolFacade) -> Server:
    """Bind a facade to a fresh MCP server instance."""
    server = Server("cyberlink-mcp", version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return await facade.list_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        return await facade.call_tool(name, arguments)

    return server


def _log_progress(state: ProgressState) -> None:
    logger.info("[%3d%%] %s", round(state.progress * 100), state.message)


async def build_facade(config: ServerConfig, *, with_embeddings: bool = True) -> ToolFacade:
    """Connect the gateways described by ``config``.

    One ledger connection is shared by both gateways for the lifetime of
    the process. The transaction gateway exists only when a wallet
    mnemonic is configured.

    Args:
        config: Server settings.
        with_embeddings: Load the embedding model when ``config`` enables
            it. One-shot commands that never embed pass False.

    Raises:
        ConfigError: Missing settings or an unreachable node.
    """
    config.validate_required()
    ledger = CosmpyLedger(
        node_url=config.node_url,
        chain_id=config.chain_id,
        denom=config.denom,
        gas_price=config.gas_price,
        prefix=config.address_prefix,
        mnemonic=config.wallet_mnemonic,
    )

    query = QueryGateway(ledger, config.contract_address, config.result_fields)
    await query.initialize()

    tx = None
    if config.signing_enabled:
        tx = TransactionGateway(
            ledger,
            config.contract_address,
            denom=config.denom,
            result_fields=config.result_fields,
            timeout_ms=config.tx_timeout_ms,
            poll_interval_ms=config.tx_poll_interval_ms,
        )
        await tx.initialize()
    else:
        logger.warning("WALLET_MNEMONIC not set: write tools will return unsent messages")

    embeddings = None
    if config.embeddings and with_embeddings:
        embeddings = EmbeddingService(config.embedding_model, progress_callback=_log_progress)
        try:
            await embeddings.initialize()
        except Exception as exc:
            logger.error("Embeddings disabled, model failed to load: %s", exc)
            embeddings = None

    return ToolFacade(query, MessageBuilder(), tx=tx, embeddings=embeddings, denom=config.denom)


# ═══════════════════════════════════════════════════════════
# Entry Point
# ═══════════════════════════════════════════════════════════


def main(config: Optional[ServerConfig] = None) -> None:
    """Run the MCP server on stdio transport."""
    logging.basicConfig(level=logging.WARNING, format="%(name)s: %(message)s")
    try:
        asyncio.run(_run_server(config or load_config()))
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(1)


async def _run_server(config: ServerConfig) -> None:
    """Async entry point for the stdio MCP server."""
    facade = await build_facade(config)
    server = create_server(facade)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
