"""
InboundMessage entity - a message delivered to the device by the broker.
"""

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class InboundMessage:
    """
    Message received on a subscribed topic. Not retained after handling.

    Attributes:
        topic: Topic the message arrived on
        payload: Raw payload bytes
        qos: QoS the message was delivered with
        received_at: Arrival time (UTC)
    """

    topic: str
    payload: bytes
    qos: int = 0
    received_at: Optional[datetime] = None

    def __post_init__(self):
        if self.received_at is None:
            object.__setattr__(self, "received_at", datetime.now(timezone.utc))

    def decode_text(self) -> str:
        """
        Decode the payload for logging.

        Payloads are treated as base64-encoded text. When the payload is
        not valid base64 or does not decode to UTF-8 text, the raw payload
        is returned as text instead.

        Returns:
            Decoded text (empty string for an empty payload)
        """
        if not self.payload:
            return ""

        try:
            return base64.b64decode(self.payload, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return self.payload.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"InboundMessage(topic={self.topic!r}, bytes={len(self.payload)})"
