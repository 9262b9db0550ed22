"""Tests for pagination normalization."""

from __future__ import annotations

import pytest

from cyberlink_mcp.pagination import DEFAULT_LIMIT, clamp_limit, pagination_params


class TestClampLimit:
    """Tests for clamp_limit."""

    @pytest.mark.parametrize(
        "requested,expected",
        [(-5, 1), (0, 1), (1, 1), (50, 50), (100, 100), (500, 100)],
    )
    def test_clamps_into_range(self, requested, expected):
        assert clamp_limit(requested) == expected

    def test_missing_limit_uses_default(self):
        assert clamp_limit(None) == DEFAULT_LIMIT
        assert clamp_limit() == DEFAULT_LIMIT

    def test_numeric_string_accepted(self):
        assert clamp_limit("20") == 20

    def test_garbage_uses_default(self):
        assert clamp_limit("lots") == DEFAULT_LIMIT


class TestPaginationParams:
    """Tests for pagination_params."""

    def test_cursor_included_when_given(self):
        assert pagination_params(10, 500) == {"start_after": 10, "limit": 100}

    def test_cursor_omitted_when_absent(self):
        assert pagination_params(None, 5) == {"limit": 5}
        assert pagination_params("", 5) == {"limit": 5}

    def test_zero_cursor_kept(self):
        assert pagination_params(0) == {"start_after": 0, "limit": DEFAULT_LIMIT}
