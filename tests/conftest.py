"""
Test fixtures and configuration.
"""

from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from station.config.settings import Settings, reset_settings
from tests.helpers.fake_mqtt import FakeBroker


def _write_private_key(key, path: Path) -> Path:
    path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """RSA key shared by the test session (generation is slow)."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """P-256 key for ES256 signing."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def rsa_key_file(tmp_path, rsa_private_key) -> Path:
    """PEM file holding the RSA private key."""
    return _write_private_key(rsa_private_key, tmp_path / "rsa_private.pem")


@pytest.fixture
def ec_key_file(tmp_path, ec_private_key) -> Path:
    """PEM file holding the EC private key."""
    return _write_private_key(ec_private_key, tmp_path / "ec_private.pem")


@pytest.fixture
def settings(rsa_key_file) -> Settings:
    """Settings pointing at a local plaintext broker and the RSA test key."""
    return Settings(
        ENV="test",
        project_id="test-project",
        cloud_region="europe-west1",
        registry_id="test-registry",
        device_id="station",
        private_key_file=str(rsa_key_file),
        algorithm="RS256",
        mqtt_bridge_hostname="localhost",
        mqtt_bridge_port=1883,
        use_tls=False,
        connect_timeout=1.0,
        publish_interval=5.0,
        shutdown_timeout=2,
        verbose=1,
    )


@pytest.fixture
def broker() -> FakeBroker:
    """Scripted in-memory broker."""
    return FakeBroker()


@pytest.fixture(autouse=True)
def _reset_global_settings():
    """Keep the settings singleton isolated between tests."""
    reset_settings()
    yield
    reset_settings()
