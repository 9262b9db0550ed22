"""Tests for result sanitization."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from cyberlink_mcp.models import TxOutcome, TxStatus
from cyberlink_mcp.sanitize import MAX_SAFE_INTEGER, sanitize_result


class TestSanitizeResult:
    """Tests for sanitize_result."""

    def test_large_integer_becomes_decimal_string(self):
        assert sanitize_result({"gas": 123456789012345678}) == {"gas": "123456789012345678"}

    def test_safe_integer_kept(self):
        assert sanitize_result({"height": 42}) == {"height": 42}
        assert sanitize_result(MAX_SAFE_INTEGER) == MAX_SAFE_INTEGER
        assert sanitize_result(-(MAX_SAFE_INTEGER + 1)) == str(-(MAX_SAFE_INTEGER + 1))

    def test_bool_not_treated_as_int(self):
        assert sanitize_result({"ok": True}) == {"ok": True}

    def test_callables_dropped_from_mappings(self):
        assert sanitize_result({"a": 1, "fn": lambda: None}) == {"a": 1}

    def test_absent_values_omitted(self):
        assert sanitize_result({"a": None, "b": {"c": None}}) == {"b": {}}

    def test_sequences_mapped_elementwise(self):
        big = 2**60
        assert sanitize_result([1, big, (2, 3)]) == [1, str(big), [2, 3]]

    def test_decimal_and_bytes(self):
        assert sanitize_result({"d": Decimal("1.50"), "b": b"\x01\xff"}) == {
            "d": "1.50",
            "b": "01ff",
        }

    def test_pydantic_model(self):
        outcome = TxOutcome(status=TxStatus.COMPLETED, info={"gasUsed": 2**60})
        cleaned = sanitize_result(outcome)
        assert cleaned["status"] == "completed"
        assert cleaned["info"] == {"gasUsed": str(2**60)}
        assert "error" not in cleaned

    @pytest.mark.parametrize(
        "tree",
        [
            {"a": [1, 2**62, {"b": None, "c": "x"}], "d": lambda: 1},
            [None, {"k": Decimal("3.14")}, b"raw"],
            {"nested": {"deep": {"value": 123456789012345678}}},
            "plain",
        ],
    )
    def test_idempotent(self, tree):
        once = sanitize_result(tree)
        assert sanitize_result(once) == once

    def test_output_is_json_serializable(self):
        tree = {"x": 2**64, "y": [Decimal("1"), b"ab"], "z": object()}
        json.dumps(sanitize_result(tree))
