"""
Authentication infrastructure for the station.
"""
from station.infrastructure.auth.jwt_signer import JWTSigner

__all__ = ["JWTSigner"]
