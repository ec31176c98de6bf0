"""Wire envelope codec.

Every message exchanged with a peer is a JSON object::

    {"event": "<name>", "data": <any JSON value>}

Decoding never raises: anything that is not a well-formed envelope comes
back as a ``DecodeFailure`` holding the original input, so the caller can
route it to the ``$unknown`` event.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from .errors import InvalidArgument
from .events import is_reserved

logger = logging.getLogger(__name__)


class Envelope(BaseModel):
    """A decoded message.

    ``data`` is required but may be ``null``; an absent key is malformed.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    event: StrictStr = Field(min_length=1)
    data: Any


@dataclass(frozen=True)
class DecodeFailure:
    """Inbound message that could not be decoded into an Envelope."""

    raw: str | bytes
    reason: str


def encode(event: str, data: Any) -> str:
    """Serialize an envelope to JSON text.

    Raises:
        InvalidArgument: If event is not a non-empty string, or data is
            callable or cannot be represented as JSON.
    """
    if not isinstance(event, str) or not event:
        raise InvalidArgument("Event name must be a non-empty string.")
    if callable(data):
        raise InvalidArgument("Event data must not be a function.")

    try:
        return json.dumps({"event": event, "data": data}, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"Event data is not JSON serializable: {e}") from e


def decode(raw: str | bytes) -> Envelope | DecodeFailure:
    """Parse and validate a message received from a peer.

    Peers may not name reserved events; such envelopes are failures too.
    """
    try:
        envelope = Envelope.model_validate_json(raw)
    except ValidationError as e:
        reason = "; ".join(error["msg"] for error in e.errors())
        return DecodeFailure(raw=raw, reason=reason)

    if is_reserved(envelope.event):
        return DecodeFailure(raw=raw, reason=f"Event name {envelope.event!r} is reserved")
    return envelope
