#!/usr/bin/env python3
"""Example: Quickstart

Generates a throwaway self-signed certificate, installs it into a
filesystem-backed certificate store, lists the store and removes the
certificate again.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install certificate-tool
"""
from __future__ import annotations

import datetime
import tempfile
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

import certificate_tool
from certificate_tool import (
    CertificateAssembler,
    CertificateSource,
    FilesystemCertStore,
    StoreLocation,
    StoreName,
    StoreOperator,
)


def _write_demo_pfx(directory: Path, password: str) -> Path:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "quickstart.example.test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    path = directory / "quickstart.pfx"
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            name=b"quickstart",
            key=key,
            cert=cert,
            cas=None,
            encryption_algorithm=serialization.BestAvailableEncryption(password.encode()),
        )
    )
    return path


def main() -> None:
    print(f"certificate-tool version: {certificate_tool.__version__}")

    with tempfile.TemporaryDirectory() as workdir:
        root = Path(workdir)

        # Step 1: Load the PKCS#12 file
        pfx_path = _write_demo_pfx(root, "secret")
        credential = CertificateAssembler().assemble(
            CertificateSource.from_options(pfx_path=pfx_path), password="secret"
        )
        print(f"Loaded certificate: {credential.subject} ({credential.thumbprint})")

        # Step 2: Install it into a store
        operator = StoreOperator(
            lambda name, location: FilesystemCertStore(root / "stores" / location.value, name, location),
            reporter=print,
        )
        operator.add_certificate(credential, StoreName.MY, StoreLocation.CURRENT_USER)

        # Step 3: List the store
        for summary in operator.snapshot(StoreName.MY, StoreLocation.CURRENT_USER):
            for label, value in summary.rows():
                print(f"  {label:<20}: {value}")

        # Step 4: Remove it again
        operator.remove_certificate(
            StoreName.MY, StoreLocation.CURRENT_USER, thumbprint=credential.thumbprint
        )

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
