"""
ConnectionDescriptor value object - everything needed to open a session.
"""

from dataclasses import dataclass, field
from typing import Optional

from station.domain.identity import SignedToken

# The bridge ignores the username but requires it to be non-empty
DEFAULT_USERNAME = "unused"


@dataclass(frozen=True)
class TransportSecurity:
    """
    TLS settings for the broker connection.

    Attributes:
        enabled: Use TLS (required by the Cloud IoT bridge)
        ca_certs: Optional CA bundle path (system trust store if None)
    """

    enabled: bool = True
    ca_certs: Optional[str] = None


@dataclass(frozen=True)
class ConnectionDescriptor:
    """
    Immutable connection parameters for one broker session.

    Attributes:
        host: Broker hostname
        port: Broker port
        client_id: MQTT client identifier
        token: Signed JWT sent as the password
        username: MQTT username
        security: TLS settings
        keepalive: MQTT keepalive in seconds
    """

    host: str
    port: int
    client_id: str
    token: SignedToken
    username: str = DEFAULT_USERNAME
    security: TransportSecurity = field(default_factory=TransportSecurity)
    keepalive: int = 60

    def __post_init__(self):
        """Validate descriptor on creation."""
        if not self.host:
            raise ValueError("host cannot be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")
        if not self.client_id:
            raise ValueError("client_id cannot be empty")
        if not self.username:
            raise ValueError("username cannot be empty")
        if self.keepalive <= 0:
            raise ValueError("keepalive must be positive")

    @property
    def password(self) -> str:
        """Password sent in CONNECT (the JWT)."""
        return self.token.value

    def __repr__(self) -> str:
        """Detailed representation without the token."""
        return (
            f"ConnectionDescriptor(host={self.host!r}, port={self.port}, "
            f"client_id={self.client_id!r}, tls={self.security.enabled})"
        )
