"""Unit tests for reserved event names."""

from __future__ import annotations

import pytest

from socket_events.events import EVENTS, ReservedEvent, is_reserved


class TestReservedEvents:
    """Tests for the reserved name table."""

    def test_reserved_names(self) -> None:
        """Every reserved event carries the marker."""
        assert EVENTS == {
            "message": "$message",
            "error": "$error",
            "unknown": "$unknown",
            "close": "$close",
            "connection": "$connection",
        }

    def test_enum_values_are_strings(self) -> None:
        """Enum members compare equal to their names."""
        assert ReservedEvent.CLOSE == "$close"
        assert ReservedEvent.CONNECTION.value == "$connection"

    def test_table_is_read_only(self) -> None:
        """The table cannot be modified."""
        with pytest.raises(TypeError):
            EVENTS["close"] = "close"  # type: ignore[index]

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("$close", True), ("$custom", True), ("close", False), ("message", False), ("", False)],
    )
    def test_is_reserved(self, name, expected) -> None:
        """Reserved namespace is identified by the leading marker."""
        assert is_reserved(name) is expected
