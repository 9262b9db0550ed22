"""
Execute-message construction for the CW-Social contract.

Pure and synchronous: nothing here touches the network. Two transforms
apply to every message: a structured ``value`` is serialized to a string
exactly once, and optional fields that are empty are left out entirely,
because the contract treats an omitted field differently from an empty one.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from .models import Cyberlink, CyberlinkValue

logger = logging.getLogger("cyberlink_mcp.messages")

LinkLike = Union[Cyberlink, Mapping[str, Any]]


def remove_empty_values(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None or an empty string."""
    return {k: v for k, v in obj.items() if v is not None and v != ""}


def stringify_value(value: Any) -> Optional[str]:
    """Serialize a structured value for the wire.

    Strings are already in wire form and pass through unchanged, so a value
    is never encoded twice. Empty values return None.
    """
    if value is None or value == "" or value == {}:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, CyberlinkValue):
        value = value.model_dump(exclude_none=True)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def value_fields(value: Any) -> dict[str, Any]:
    """The stored ``value`` as a plain mapping, every key preserved.

    A JSON object string is decoded as is. Any other string becomes
    ``{"content": text}``.
    """
    if value is None or value == "":
        return {}
    if isinstance(value, CyberlinkValue):
        return value.model_dump(exclude_none=True)
    if isinstance(value, Mapping):
        return dict(value)
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed
    return {"content": str(value)}


def parse_value(value: Union[str, Mapping[str, Any], CyberlinkValue, None]) -> CyberlinkValue:
    """Turn a stored ``value`` back into a CyberlinkValue.

    A string that is not a JSON object is treated as plain content. Keys
    outside the model are not kept; use ``value_fields`` to rewrite a value.
    """
    if isinstance(value, CyberlinkValue):
        return value
    try:
        return CyberlinkValue.model_validate(value_fields(value))
    except ValidationError:
        logger.debug("value is JSON but not a cyberlink value; keeping as content")
    return CyberlinkValue(content=str(value))


class MessageBuilder:
    """Builds the execute payload for each write the contract supports."""

    def _process(self, link: LinkLike) -> dict[str, Any]:
        """Validate a cyberlink and render its wire payload."""
        if not isinstance(link, Cyberlink):
            link = Cyberlink.model_validate(dict(link))
        payload = remove_empty_values(link.to_payload())
        if "value" in payload:
            payload["value"] = stringify_value(payload["value"])
        return remove_empty_values(payload)

    def create_cyberlink(self, link: LinkLike) -> dict[str, Any]:
        return {"create_cyberlink": {"cyberlink": self._process(link)}}

    def create_named_cyberlink(self, name: str, link: LinkLike) -> dict[str, Any]:
        return {
            "create_named_cyberlink": {
                "name": name,
                "cyberlink": self._process(link),
            }
        }

    def create_cyberlinks(self, links: Sequence[LinkLike]) -> dict[str, Any]:
        return {
            "create_cyberlinks": {
                "cyberlinks": [self._process(link) for link in links],
            }
        }

    def create_cyberlink2(
        self,
        node_type: str,
        link_type: str,
        node_value: Any = None,
        link_value: Any = None,
        link_from_existing_gid: Optional[Union[int, str]] = None,
        link_to_existing_gid: Optional[Union[int, str]] = None,
    ) -> dict[str, Any]:
        """Create a node and a link attached to it in one transaction.

        Args:
            node_type: Type of the new node.
            link_type: Type of the link connecting it.
            node_value: Optional node payload.
            link_value: Optional link payload.
            link_from_existing_gid: Link source, when it is not the new node.
            link_to_existing_gid: Link target, when it is not the new node.

        Returns:
            The ``create_cyberlink2`` execute message.
        """
        return {
            "create_cyberlink2": remove_empty_values({
                "node_type": node_type,
                "node_value": stringify_value(node_value),
                "link_type": link_type,
                "link_value": stringify_value(link_value),
                "link_from_existing_gid": link_from_existing_gid,
                "link_to_existing_gid": link_to_existing_gid,
            })
        }

    def update_cyberlink(self, gid: int, link: LinkLike) -> dict[str, Any]:
        return {"update_cyberlink": {"gid": gid, "cyberlink": self._process(link)}}

    def delete_cyberlink(self, gid: int) -> dict[str, Any]:
        return {"delete_cyberlink": {"gid": gid}}

    def update_admins(self, new_admins: Sequence[str]) -> dict[str, Any]:
        return {"update_admins": {"new_admins": list(new_admins)}}

    def update_executors(self, new_executors: Sequence[str]) -> dict[str, Any]:
        return {"update_executors": {"new_executors": list(new_executors)}}

    def send_tokens(self, recipient: str, amount: Union[int, str], denom: str) -> dict[str, Any]:
        """Bank transfer message for an external signer to complete.

        ``from_address`` is left for the signer to fill in.
        """
        return {
            "@type": "/cosmos.bank.v1beta1.MsgSend",
            "to_address": recipient,
            "amount": [{"denom": denom, "amount": str(amount)}],
        }

    def with_embedding(self, value: Any, embedding: Sequence[float]) -> str:
        """Reserialize a stored value with only its ``embedding`` replaced."""
        fields = value_fields(value)
        fields["embedding"] = [float(x) for x in embedding]
        return stringify_value(fields)
