"""
Domain exceptions for the station agent.
"""

from station.domain.exceptions.base import StationError
from station.domain.exceptions.credential_exceptions import (
    CredentialError,
    KeyReadError,
    SigningError,
)
from station.domain.exceptions.transport_exceptions import (
    ConnectError,
    PublishError,
    SessionClosedError,
    SubscribeError,
    TransportError,
)

__all__ = [
    "StationError",
    "CredentialError",
    "KeyReadError",
    "SigningError",
    "TransportError",
    "ConnectError",
    "SessionClosedError",
    "PublishError",
    "SubscribeError",
]
