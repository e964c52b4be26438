"""Shared fixtures: keys, self-signed certificates and their file encodings."""
from __future__ import annotations

import base64
import datetime
from pathlib import Path
from typing import Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from certificate_tool.config import Settings
from certificate_tool.keystorage import KeyStorage

PFX_PASSWORD = "pw123"

CertificateFactory = Callable[[PrivateKeyTypes, str], x509.Certificate]


def _self_signed(key: PrivateKeyTypes, common_name: str) -> x509.Certificate:
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Certificate Tool Tests"),
        ]
    )
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )


# ---------------------------------------------------------------------------
# Keys and certificates
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def certificate_factory() -> CertificateFactory:
    return _self_signed


@pytest.fixture(scope="session")
def rsa_cert(rsa_key: rsa.RSAPrivateKey) -> x509.Certificate:
    return _self_signed(rsa_key, "fixture.example.test")


@pytest.fixture(scope="session")
def ec_cert(ec_key: ec.EllipticCurvePrivateKey) -> x509.Certificate:
    return _self_signed(ec_key, "ec.example.test")


@pytest.fixture(scope="session")
def rsa_thumbprint(rsa_cert: x509.Certificate) -> str:
    return rsa_cert.fingerprint(hashes.SHA1()).hex().upper()


@pytest.fixture(scope="session")
def pfx_bytes(rsa_key: rsa.RSAPrivateKey, rsa_cert: x509.Certificate) -> bytes:
    return pkcs12.serialize_key_and_certificates(
        name=b"fixture",
        key=rsa_key,
        cert=rsa_cert,
        cas=None,
        encryption_algorithm=serialization.BestAvailableEncryption(PFX_PASSWORD.encode()),
    )


@pytest.fixture(scope="session")
def pfx_base64(pfx_bytes: bytes) -> str:
    return base64.b64encode(pfx_bytes).decode("ascii")


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@pytest.fixture()
def pfx_file(tmp_path: Path, pfx_bytes: bytes) -> Path:
    path = tmp_path / "fixture.pfx"
    path.write_bytes(pfx_bytes)
    return path


@pytest.fixture()
def cert_pem_file(tmp_path: Path, rsa_cert: x509.Certificate) -> Path:
    path = tmp_path / "fixture.crt"
    path.write_bytes(rsa_cert.public_bytes(serialization.Encoding.PEM))
    return path


@pytest.fixture()
def pkcs8_key_file(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    path = tmp_path / "fixture-pkcs8.key"
    path.write_bytes(
        rsa_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture()
def encrypted_pkcs8_key_file(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    path = tmp_path / "fixture-encrypted.key"
    path.write_bytes(
        rsa_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(PFX_PASSWORD.encode()),
        )
    )
    return path


@pytest.fixture()
def rsa_pkcs1_key_file(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    path = tmp_path / "fixture-rsa.key"
    path.write_bytes(
        rsa_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
    )
    return path


# ---------------------------------------------------------------------------
# Stores and settings
# ---------------------------------------------------------------------------


@pytest.fixture()
def store_root(tmp_path: Path) -> Path:
    return tmp_path / "stores"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        current_user_root=tmp_path / "stores" / "current-user",
        local_machine_root=tmp_path / "stores" / "local-machine",
        key_storage=KeyStorage.DEFAULT,
        log_level="WARNING",
    )
