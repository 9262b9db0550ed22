"""Tests for execute-message construction."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from cyberlink_mcp.messages import (
    MessageBuilder,
    parse_value,
    remove_empty_values,
    stringify_value,
    value_fields,
)
from cyberlink_mcp.models import Cyberlink, CyberlinkValue


@pytest.fixture
def builder() -> MessageBuilder:
    return MessageBuilder()


class TestHelpers:
    """Tests for the payload helpers."""

    def test_remove_empty_values(self):
        assert remove_empty_values({"a": "", "b": None, "c": 0, "d": "x"}) == {"c": 0, "d": "x"}

    def test_stringify_mapping(self):
        assert stringify_value({"content": "hi", "tags": ["a"]}) == '{"content":"hi","tags":["a"]}'

    def test_stringify_string_passes_through(self):
        encoded = stringify_value({"content": "hi"})
        assert stringify_value(encoded) == encoded

    def test_stringify_empty(self):
        assert stringify_value(None) is None
        assert stringify_value("") is None

    def test_parse_json_object(self):
        value = parse_value('{"content": "hello", "tags": ["x"]}')
        assert value.content == "hello"
        assert value.tags == ["x"]

    def test_parse_plain_text(self):
        assert parse_value("just words") == CyberlinkValue(content="just words")

    def test_parse_json_non_object(self):
        assert parse_value("[1, 2]").content == "[1, 2]"


class TestMessageBuilder:
    """Tests for MessageBuilder payloads."""

    def test_create_strips_empty_fields(self, builder: MessageBuilder):
        msg = builder.create_cyberlink({"type": "post", "from": "", "to": None, "value": "hi"})
        link = msg["create_cyberlink"]["cyberlink"]
        assert "from" not in link
        assert "to" not in link
        assert link == {"type": "post", "value": "hi"}

    def test_create_serializes_structured_value_once(self, builder: MessageBuilder):
        msg = builder.create_cyberlink({"type": "post", "value": {"content": "hello"}})
        value = msg["create_cyberlink"]["cyberlink"]["value"]
        assert isinstance(value, str)
        assert json.loads(value) == {"content": "hello"}

    def test_create_accepts_model(self, builder: MessageBuilder):
        link = Cyberlink(type="follows", **{"from": "alice:1", "to": "bob:2"})
        msg = builder.create_cyberlink(link)
        assert msg["create_cyberlink"]["cyberlink"] == {
            "type": "follows",
            "from": "alice:1",
            "to": "bob:2",
        }

    def test_create_requires_type(self, builder: MessageBuilder):
        with pytest.raises(ValidationError):
            builder.create_cyberlink({"value": "no type"})

    def test_named(self, builder: MessageBuilder):
        msg = builder.create_named_cyberlink("root", {"type": "Type", "value": ""})
        assert msg == {"create_named_cyberlink": {"name": "root", "cyberlink": {"type": "Type"}}}

    def test_batch(self, builder: MessageBuilder):
        msg = builder.create_cyberlinks([
            {"type": "a", "value": {"content": "x"}},
            {"type": "b", "to": ""},
        ])
        links = msg["create_cyberlinks"]["cyberlinks"]
        assert links[0] == {"type": "a", "value": '{"content":"x"}'}
        assert links[1] == {"type": "b"}

    def test_cyberlink2(self, builder: MessageBuilder):
        msg = builder.create_cyberlink2(
            node_type="Post",
            link_type="ReplyTo",
            node_value={"content": "reply"},
            link_to_existing_gid=7,
        )
        assert msg == {
            "create_cyberlink2": {
                "node_type": "Post",
                "node_value": '{"content":"reply"}',
                "link_type": "ReplyTo",
                "link_to_existing_gid": 7,
            }
        }

    def test_update_and_delete(self, builder: MessageBuilder):
        assert builder.update_cyberlink(3, {"type": "t", "from": ""}) == {
            "update_cyberlink": {"gid": 3, "cyberlink": {"type": "t"}}
        }
        assert builder.delete_cyberlink(3) == {"delete_cyberlink": {"gid": 3}}

    def test_admin_lists(self, builder: MessageBuilder):
        assert builder.update_admins(("wasm1a",)) == {"update_admins": {"new_admins": ["wasm1a"]}}
        assert builder.update_executors(["wasm1b"]) == {
            "update_executors": {"new_executors": ["wasm1b"]}
        }

    def test_send_tokens(self, builder: MessageBuilder):
        msg = builder.send_tokens("wasm1dest", 100, "stake")
        assert msg["to_address"] == "wasm1dest"
        assert msg["amount"] == [{"denom": "stake", "amount": "100"}]

    def test_with_embedding_keeps_content(self, builder: MessageBuilder):
        value = builder.with_embedding('{"content": "hi", "tags": ["t"]}', [0.5, 0.25])
        assert json.loads(value) == {"content": "hi", "embedding": [0.5, 0.25], "tags": ["t"]}

    def test_with_embedding_plain_text(self, builder: MessageBuilder):
        value = builder.with_embedding("hello", [1.0])
        assert json.loads(value) == {"content": "hello", "embedding": [1.0]}

    def test_with_embedding_preserves_extra_keys(self, builder: MessageBuilder):
        stored = '{"content":"hello","tags":["a"],"title":"T"}'
        value = builder.with_embedding(stored, [0.1, 0.2])
        assert json.loads(value) == {
            "content": "hello",
            "tags": ["a"],
            "title": "T",
            "embedding": [0.1, 0.2],
        }

    def test_with_embedding_keeps_structured_content(self, builder: MessageBuilder):
        stored = '{"content":{"text":"hello"},"tags":["a"]}'
        value = builder.with_embedding(stored, [0.1])
        assert json.loads(value) == {
            "content": {"text": "hello"},
            "tags": ["a"],
            "embedding": [0.1],
        }

    def test_with_embedding_replaces_old_vector(self, builder: MessageBuilder):
        value = builder.with_embedding('{"content":"x","embedding":[9.0]}', [1.0])
        assert json.loads(value) == {"content": "x", "embedding": [1.0]}


class TestValueFields:
    """Tests for value_fields."""

    def test_json_object_kept_whole(self):
        assert value_fields('{"content": "a", "title": "T"}') == {"content": "a", "title": "T"}

    def test_plain_text(self):
        assert value_fields("hello") == {"content": "hello"}

    def test_json_non_object(self):
        assert value_fields("[1, 2]") == {"content": "[1, 2]"}

    def test_empty(self):
        assert value_fields(None) == {}
        assert value_fields("") == {}
