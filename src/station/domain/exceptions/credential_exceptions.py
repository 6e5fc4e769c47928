"""
Credential (private key and token signing) exceptions.
"""

from station.domain.exceptions.base import StationError


class CredentialError(StationError):
    """Base exception for credential errors. Fatal at startup."""

    pass


class KeyReadError(CredentialError):
    """Raised when the private key file cannot be read or parsed."""

    def __init__(self, key_file: str, reason: str):
        """
        Initialize KeyReadError.

        Args:
            key_file: Path of the private key file
            reason: Why the key could not be loaded
        """
        super().__init__(f"Cannot load private key '{key_file}': {reason}")
        self.key_file = key_file
        self.reason = reason


class SigningError(CredentialError):
    """Raised when a token cannot be signed with the given key and algorithm."""

    def __init__(self, algorithm: str, reason: str):
        """
        Initialize SigningError.

        Args:
            algorithm: JWT algorithm requested
            reason: Why signing failed
        """
        super().__init__(f"Cannot sign token with {algorithm}: {reason}")
        self.algorithm = algorithm
        self.reason = reason
