"""
Broker transport exceptions.
"""

from typing import Optional

from station.domain.exceptions.base import StationError


class TransportError(StationError):
    """Base exception for broker transport errors."""

    pass


class ConnectError(TransportError):
    """Raised when a connection to the broker cannot be established."""

    def __init__(self, host: str, port: int, reason: str):
        """
        Initialize ConnectError.

        Args:
            host: Broker host
            port: Broker port
            reason: Connection failure reason (CONNACK reason, socket error)
        """
        super().__init__(f"Cannot connect to {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class SessionClosedError(TransportError):
    """Raised when publishing or subscribing on a closed session."""

    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation}: session is closed")
        self.operation = operation


class PublishError(TransportError):
    """Reported when the transport rejects a publish."""

    def __init__(self, topic: str, reason: str, mid: Optional[int] = None):
        super().__init__(f"Publish to '{topic}' failed: {reason}")
        self.topic = topic
        self.reason = reason
        self.mid = mid


class SubscribeError(TransportError):
    """Reported when the broker refuses a subscription."""

    def __init__(self, topic: str, reason: str):
        super().__init__(f"Subscription to '{topic}' failed: {reason}")
        self.topic = topic
        self.reason = reason
