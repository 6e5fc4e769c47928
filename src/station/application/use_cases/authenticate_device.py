"""
Use case for authenticating the device against the MQTT bridge.
"""

import time
from typing import Callable

from station.domain.identity import DEFAULT_TOKEN_LIFETIME_SECONDS, IdentityClaims
from station.domain.value_objects import (
    ConnectionDescriptor,
    DeviceIdentity,
    TransportSecurity,
)
from station.infrastructure.auth import JWTSigner


class AuthenticateDeviceUseCase:
    """
    Use case for building the credentials of one connection attempt.

    Issues fresh identity claims, signs them with the device key and
    wraps the token into a ConnectionDescriptor.
    """

    def __init__(
        self,
        signer: JWTSigner,
        identity: DeviceIdentity,
        host: str,
        port: int,
        security: TransportSecurity,
        keepalive: int = 60,
        token_lifetime_seconds: int = DEFAULT_TOKEN_LIFETIME_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize use case.

        Args:
            signer: JWT signer holding the device key path
            identity: Device registry coordinates
            host: MQTT bridge hostname
            port: MQTT bridge port
            security: TLS settings
            keepalive: MQTT keepalive in seconds
            token_lifetime_seconds: JWT validity window
            clock: Current Unix time provider
        """
        self.signer = signer
        self.identity = identity
        self.host = host
        self.port = port
        self.security = security
        self.keepalive = keepalive
        self.token_lifetime_seconds = token_lifetime_seconds
        self.clock = clock

    def execute(self) -> ConnectionDescriptor:
        """
        Mint a token and build the connection descriptor.

        Returns:
            ConnectionDescriptor carrying a freshly signed token

        Raises:
            KeyReadError: If the private key cannot be loaded
            SigningError: If the token cannot be signed
        """
        claims = IdentityClaims.issue(
            audience=self.identity.project_id,
            lifetime_seconds=self.token_lifetime_seconds,
            now=self.clock(),
        )
        token = self.signer.sign(claims)

        return ConnectionDescriptor(
            host=self.host,
            port=self.port,
            client_id=self.identity.client_id,
            token=token,
            security=self.security,
            keepalive=self.keepalive,
        )
