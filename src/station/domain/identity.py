"""
Identity domain models for the station.

Defines the JWT claims a device presents to the MQTT bridge and the
signed token built from them.
"""

import time
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Cloud IoT Core rejects tokens valid for more than 24 hours
MAX_TOKEN_LIFETIME_SECONDS = 24 * 60 * 60
DEFAULT_TOKEN_LIFETIME_SECONDS = 20 * 60


class IdentityClaims(BaseModel):
    """
    JWT claims identifying a device to the broker.

    Created fresh for each authentication attempt and never mutated.

    Attributes:
        issued_at: Issued at time (Unix timestamp, "iat")
        expires_at: Expiration time (Unix timestamp, "exp")
        audience: Cloud project id ("aud")
    """

    model_config = ConfigDict(frozen=True)

    issued_at: int = Field(..., ge=0, description="Issued at (Unix timestamp)")
    expires_at: int = Field(..., ge=0, description="Expiration (Unix timestamp)")
    audience: str = Field(..., min_length=1, description="Cloud project id")

    @model_validator(mode="after")
    def check_window(self) -> "IdentityClaims":
        """Reject empty or over-long validity windows."""
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be later than issued_at")
        if self.expires_at - self.issued_at > MAX_TOKEN_LIFETIME_SECONDS:
            raise ValueError("Token lifetime cannot exceed 24 hours")
        return self

    @classmethod
    def issue(
        cls,
        audience: str,
        lifetime_seconds: int = DEFAULT_TOKEN_LIFETIME_SECONDS,
        now: Optional[float] = None,
    ) -> "IdentityClaims":
        """
        Build claims valid from now for the given lifetime.

        Args:
            audience: Cloud project id
            lifetime_seconds: Validity window in seconds
            now: Current Unix time (defaults to time.time())

        Returns:
            New IdentityClaims
        """
        issued_at = int(time.time() if now is None else now)
        return cls(
            issued_at=issued_at,
            expires_at=issued_at + lifetime_seconds,
            audience=audience,
        )

    @property
    def lifetime_seconds(self) -> int:
        """Length of the validity window."""
        return self.expires_at - self.issued_at

    def to_jwt_claims(self) -> Dict[str, Union[int, str]]:
        """Registered claim names as expected by the broker."""
        return {"iat": self.issued_at, "exp": self.expires_at, "aud": self.audience}


class SignedToken(BaseModel):
    """
    Signed JWT together with the claims it embeds.

    Attributes:
        value: Encoded JWT string sent as the MQTT password
        claims: Claims embedded in the token
        algorithm: Signing algorithm (RS256, ES256)
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1)
    claims: IdentityClaims
    algorithm: str

    @property
    def expires_at(self) -> int:
        """Expiration time (Unix timestamp)."""
        return self.claims.expires_at

    def seconds_until_expiry(self, now: Optional[float] = None) -> float:
        """Seconds left before the broker stops accepting this token."""
        current = time.time() if now is None else now
        return self.claims.expires_at - current

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the token has expired."""
        return self.seconds_until_expiry(now) <= 0

    def __str__(self) -> str:
        """Never print the raw token."""
        return f"SignedToken({self.algorithm}, exp={self.claims.expires_at})"
