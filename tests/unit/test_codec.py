"""Unit tests for the envelope codec."""

from __future__ import annotations

import json

import pytest

from socket_events.codec import DecodeFailure, Envelope, decode, encode
from socket_events.errors import InvalidArgument

# =============================================================================
# encode
# =============================================================================


class TestEncode:
    """Tests for envelope serialization."""

    def test_encode_produces_envelope(self) -> None:
        """Encoded text is a JSON object with event and data."""
        data = json.loads(encode("myEvent", {"a": 1}))

        assert data == {"event": "myEvent", "data": {"a": 1}}

    def test_encode_is_deterministic(self) -> None:
        """Same input always encodes to the same text."""
        assert encode("x", [1, "two", None]) == encode("x", [1, "two", None])

    @pytest.mark.parametrize("data", ["string", 42, 1.5, True, None, [1, 2], {"nested": {"k": "v"}}])
    def test_encode_accepts_json_values(self, data) -> None:
        """Any JSON value is valid data."""
        assert json.loads(encode("x", data))["data"] == data

    def test_encode_rejects_function(self) -> None:
        """Callable data is refused."""
        with pytest.raises(InvalidArgument):
            encode("x", lambda: None)

    def test_encode_rejects_unserializable(self) -> None:
        """Data that has no JSON form is refused."""
        with pytest.raises(InvalidArgument):
            encode("x", {1, 2, 3})

    def test_encode_rejects_nan(self) -> None:
        """NaN is not valid JSON."""
        with pytest.raises(InvalidArgument):
            encode("x", float("nan"))

    @pytest.mark.parametrize("event", [5, None, ""])
    def test_encode_rejects_bad_event(self, event) -> None:
        """Event name must be a non-empty string."""
        with pytest.raises(InvalidArgument):
            encode(event, "data")


# =============================================================================
# decode
# =============================================================================


class TestDecode:
    """Tests for inbound message validation."""

    def test_decode_well_formed(self) -> None:
        """Valid envelope decodes to event and data."""
        result = decode('{"event": "myEvent", "data": "string"}')

        assert isinstance(result, Envelope)
        assert result.event == "myEvent"
        assert result.data == "string"

    def test_decode_structured_data(self) -> None:
        """Structured data is kept as parsed JSON."""
        result = decode('{"event": "e", "data": {"list": [1, 2], "flag": false}}')

        assert isinstance(result, Envelope)
        assert result.data == {"list": [1, 2], "flag": False}

    def test_decode_null_data(self) -> None:
        """null is a defined value, unlike a missing key."""
        result = decode('{"event": "e", "data": null}')

        assert isinstance(result, Envelope)
        assert result.data is None

    def test_decode_bytes(self) -> None:
        """Binary frames carrying JSON decode too."""
        result = decode(b'{"event": "e", "data": 1}')

        assert isinstance(result, Envelope)
        assert result.data == 1

    def test_decode_ignores_extra_keys(self) -> None:
        """Unknown keys are ignored."""
        result = decode('{"event": "e", "data": 1, "id": "abc"}')

        assert isinstance(result, Envelope)
        assert result.event == "e"

    @pytest.mark.parametrize(
        "raw",
        [
            "test",
            "",
            "null",
            "[1, 2]",
            '"just a string"',
            '{"data": "no event"}',
            '{"event": "no data"}',
            '{"event": 5, "data": 1}',
            '{"event": "", "data": 1}',
            '{"event": "e", "data": 1',
            b"\xff\xfe",
        ],
    )
    def test_decode_malformed(self, raw) -> None:
        """Anything but a well-formed envelope is a failure carrying the raw input."""
        result = decode(raw)

        assert isinstance(result, DecodeFailure)
        assert result.raw is raw
        assert result.reason

    def test_decode_rejects_reserved_event(self) -> None:
        """Peers cannot name reserved events."""
        result = decode('{"event": "$close", "data": null}')

        assert isinstance(result, DecodeFailure)
        assert "reserved" in result.reason
