"""
Server configuration.

Settings come from, lowest precedence first: model defaults,
``$CYBERLINK_MCP_HOME/config.yaml``, a ``.env`` file in the working
directory, and the process environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from . import CONFIG_HOME
from .confirmation import DEFAULT_POLL_INTERVAL_MS, DEFAULT_RESULT_FIELDS, DEFAULT_TIMEOUT_MS
from .embedding import DEFAULT_MODEL
from .errors import ConfigError

logger = logging.getLogger("cyberlink_mcp.config")

ENV_VARS: dict[str, str] = {
    "node_url": "NODE_URL",
    "chain_id": "CHAIN_ID",
    "contract_address": "CONTRACT_ADDRESS",
    "wallet_mnemonic": "WALLET_MNEMONIC",
    "denom": "DENOM",
    "gas_price": "GAS_PRICE",
    "address_prefix": "ADDRESS_PREFIX",
    "tx_timeout_ms": "TX_TIMEOUT_MS",
    "tx_poll_interval_ms": "TX_POLL_INTERVAL_MS",
    "result_fields": "RESULT_FIELDS",
    "embeddings": "ENABLE_EMBEDDINGS",
    "embedding_model": "EMBEDDING_MODEL",
}


class ServerConfig(BaseModel):
    """Connection and behaviour settings for the MCP server."""

    node_url: str = ""
    chain_id: str = ""
    contract_address: str = ""
    wallet_mnemonic: Optional[str] = None
    denom: str = "stake"
    gas_price: float = 0.025
    address_prefix: str = "wasm"
    tx_timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    tx_poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    result_fields: list[str] = Field(default_factory=lambda: list(DEFAULT_RESULT_FIELDS))
    embeddings: bool = False
    embedding_model: str = DEFAULT_MODEL

    @field_validator("result_fields", mode="before")
    @classmethod
    def _split_fields(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def signing_enabled(self) -> bool:
        """Whether writes are signed here or returned unsent."""
        return bool(self.wallet_mnemonic)

    def validate_required(self) -> None:
        """Check the settings needed to start serving.

        Raises:
            ConfigError: Naming every missing variable.
        """
        missing = []
        if not self.node_url:
            missing.append("NODE_URL")
        if not self.contract_address:
            missing.append("CONTRACT_ADDRESS")
        if self.signing_enabled and not self.chain_id:
            missing.append("CHAIN_ID")
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    def redacted(self) -> dict[str, Any]:
        """Settings safe to print: the mnemonic is masked."""
        data = self.model_dump()
        if data.get("wallet_mnemonic"):
            data["wallet_mnemonic"] = "********"
        return data


def load_config(
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True,
) -> ServerConfig:
    """Assemble the server configuration.

    Args:
        home: Directory holding ``config.yaml``. Defaults to CONFIG_HOME.
        env: Environment mapping. Defaults to ``os.environ``.
        use_dotenv: Load a ``.env`` file into the environment first.

    Returns:
        The merged ServerConfig.

    Raises:
        ConfigError: If a setting has an invalid value.
    """
    config_dir = Path(home or CONFIG_HOME).expanduser()
    data: dict[str, Any] = {}

    config_file = config_dir / "config.yaml"
    if config_file.exists():
        try:
            data.update(yaml.safe_load(config_file.read_text()) or {})
        except yaml.YAMLError as exc:
            logger.warning("Failed to load %s: %s; ignoring it", config_file, exc)

    if use_dotenv and env is None:
        load_dotenv()
    environ = os.environ if env is None else env

    for field, var in ENV_VARS.items():
        value = environ.get(var)
        if value not in (None, ""):
            data[field] = value

    try:
        return ServerConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
