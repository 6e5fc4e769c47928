"""
JWT signing infrastructure for the station.

Signs device identity claims with the device private key so the MQTT
bridge can verify them against the public key registered for the device.
"""

from pathlib import Path
from typing import Union

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from station.domain.exceptions import KeyReadError, SigningError
from station.domain.identity import IdentityClaims, SignedToken

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]

# Algorithm -> key type it requires
KEY_TYPES = {
    "RS256": rsa.RSAPrivateKey,
    "ES256": ec.EllipticCurvePrivateKey,
}


class JWTSigner:
    """
    Device JWT signer.

    Reads the PEM private key on every call to ``sign`` so a rotated key
    is picked up by the next connection attempt.

    Attributes:
        private_key_file: Path to PEM-encoded private key
        algorithm: JWT algorithm (RS256 or ES256)
    """

    def __init__(self, private_key_file: Union[str, Path], algorithm: str = "RS256"):
        """
        Initialize JWT signer.

        Args:
            private_key_file: Path to PEM-encoded private key
            algorithm: JWT algorithm (default: RS256)
        """
        self.private_key_file = str(private_key_file)
        self.algorithm = algorithm

    def load_private_key(self) -> PrivateKey:
        """
        Read and parse the private key file.

        Returns:
            Parsed private key

        Raises:
            KeyReadError: If the file cannot be read or is not a PEM private key
        """
        try:
            pem = Path(self.private_key_file).read_bytes()
        except OSError as e:
            raise KeyReadError(self.private_key_file, e.strerror or str(e)) from e

        try:
            return load_pem_private_key(pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyReadError(self.private_key_file, str(e)) from e

    def sign(self, claims: IdentityClaims) -> SignedToken:
        """
        Sign identity claims.

        Args:
            claims: Claims to embed in the token

        Returns:
            SignedToken carrying the encoded JWT and its claims

        Raises:
            KeyReadError: If the private key cannot be loaded
            SigningError: If the algorithm is unsupported or does not match
                the key type
        """
        key_type = KEY_TYPES.get(self.algorithm)
        if key_type is None:
            raise SigningError(
                self.algorithm,
                f"unsupported algorithm (supported: {sorted(KEY_TYPES)})",
            )

        private_key = self.load_private_key()
        if not isinstance(private_key, key_type):
            raise SigningError(
                self.algorithm,
                f"key in '{self.private_key_file}' is not a "
                f"{key_type.__name__.replace('PrivateKey', '')} private key",
            )

        try:
            value = jwt.encode(
                claims.to_jwt_claims(), private_key, algorithm=self.algorithm
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(self.algorithm, str(e)) from e

        return SignedToken(value=value, claims=claims, algorithm=self.algorithm)
