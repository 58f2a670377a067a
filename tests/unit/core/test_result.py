"""Tests for core.result Ok/Err."""
from __future__ import annotations

import pytest

from core.result import Err, Ok

pytestmark = pytest.mark.unit


class TestOk:
    def test_is_ok(self):
        result = Ok(42)
        assert result.is_ok()
        assert not result.is_err()
        assert result.value == 42
        assert result.error is None

    def test_unwrap(self):
        assert Ok("snapshot").unwrap() == "snapshot"

    def test_map_err_is_noop(self):
        result = Ok(1)
        assert result.map_err(lambda e: "changed") is result

    def test_and_then_chains(self):
        assert Ok(2).and_then(lambda v: Ok(v * 10)) == Ok(20)
        assert Ok(2).and_then(lambda v: Err("bad")) == Err("bad")

    def test_repr(self):
        assert repr(Ok("a")) == "Ok('a')"


class TestErr:
    def test_is_err(self):
        result = Err("timeout")
        assert result.is_err()
        assert not result.is_ok()
        assert result.error == "timeout"
        assert result.value is None

    def test_unwrap_raises(self):
        with pytest.raises(ValueError, match="timeout"):
            Err("timeout").unwrap()

    def test_map_err(self):
        assert Err("timeout").map_err(lambda e: f"Enka.Network: {e}") == Err("Enka.Network: timeout")

    def test_and_then_short_circuits(self):
        called = []
        result = Err("x").and_then(lambda v: called.append(v) or Ok(v))
        assert result == Err("x")
        assert called == []

    def test_frozen(self):
        with pytest.raises(AttributeError):
            Err("x").error = "y"
