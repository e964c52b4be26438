"""Certificate credential — an X.509 certificate with an optional private key.

CertificateCredential is the unit the assembler produces and the stores hold.
It exposes the descriptive fields shown by ``list`` and knows how to move
itself in and out of PKCS#12 containers.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import pkcs12

from certificate_tool.errors import CertificateLoadError, KeyDecodeError
from certificate_tool.keystorage import KeyStorage

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def normalize_thumbprint(thumbprint: str) -> str:
    """Return *thumbprint* uppercased with spaces and colons removed."""
    return "".join(thumbprint.split()).replace(":", "").upper()


def _oid_label(oid: x509.ObjectIdentifier) -> str:
    name = getattr(oid, "_name", None) or "Unknown OID"
    return f"{name} ({oid.dotted_string})"


def _password_bytes(password: Optional[Union[str, bytes]]) -> Optional[bytes]:
    if not password:
        return None
    return password.encode("utf-8") if isinstance(password, str) else password


@dataclass(frozen=True)
class CertificateSummary:
    """Descriptive fields of a stored certificate, as printed by ``list``."""

    subject: str
    issuer: str
    serial_number: str
    not_before: datetime.datetime
    not_after: datetime.datetime
    thumbprint: str
    signature_algorithm: str
    public_key_algorithm: str
    has_private_key: bool

    def rows(self) -> list[tuple[str, str]]:
        """Return the ``(label, value)`` pairs in display order."""
        return [
            ("Subject", self.subject),
            ("Issuer", self.issuer),
            ("Serial Number", self.serial_number),
            ("Not Before", self.not_before.strftime(_DATE_FORMAT)),
            ("Not After", self.not_after.strftime(_DATE_FORMAT)),
            ("Thumbprint", self.thumbprint),
            ("Signature Algorithm", self.signature_algorithm),
            ("PublicKey Algorithm", self.public_key_algorithm),
            ("Has PrivateKey", "Yes" if self.has_private_key else "No"),
        ]


@dataclass(frozen=True)
class CertificateCredential:
    """An X.509 certificate, optionally bound to its private key.

    Parameters
    ----------
    certificate:
        The parsed X.509 certificate.
    private_key:
        The matching private key, or None for a public-only credential.
    key_storage:
        Whether *private_key* may be exported again. Credentials built in
        memory are exportable; credentials loaded from a container take the
        configured mode.
    friendly_name:
        Friendly name carried in the PKCS#12 bag, when present.
    """

    certificate: x509.Certificate
    private_key: Optional[PrivateKeyTypes] = None
    key_storage: KeyStorage = KeyStorage.EXPORTABLE
    friendly_name: Optional[str] = None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_pkcs12(
        cls,
        data: bytes,
        password: Optional[Union[str, bytes]] = None,
        key_storage: KeyStorage = KeyStorage.DEFAULT,
    ) -> "CertificateCredential":
        """Load a credential from PKCS#12 bytes.

        Raises
        ------
        CertificateLoadError
            If the bytes are not a PKCS#12 container, the password is wrong,
            or the container holds no certificate.
        """
        try:
            bundle = pkcs12.load_pkcs12(data, _password_bytes(password))
        except (ValueError, TypeError) as exc:
            raise CertificateLoadError(f"Unable to load PKCS#12 data: {exc}") from exc

        entry = bundle.cert
        if entry is None and bundle.key is None and bundle.additional_certs:
            # A container without a key keeps its certificate in the bag list.
            entry = bundle.additional_certs[0]
        if entry is None:
            raise CertificateLoadError("PKCS#12 data does not contain a certificate.")

        friendly_name = entry.friendly_name
        return cls(
            certificate=entry.certificate,
            private_key=bundle.key,
            key_storage=key_storage,
            friendly_name=friendly_name.decode("utf-8", "replace") if friendly_name else None,
        )

    @classmethod
    def from_certificate_bytes(cls, data: bytes) -> "CertificateCredential":
        """Load a public-only credential from PEM or DER certificate bytes.

        Raises
        ------
        CertificateLoadError
            If the bytes are neither a PEM nor a DER certificate.
        """
        try:
            if b"-----BEGIN" in data:
                certificate = x509.load_pem_x509_certificate(data)
            else:
                certificate = x509.load_der_x509_certificate(data)
        except ValueError as exc:
            raise CertificateLoadError(f"Unable to parse certificate: {exc}") from exc
        return cls(certificate=certificate)

    # ------------------------------------------------------------------
    # Descriptive fields
    # ------------------------------------------------------------------

    @property
    def thumbprint(self) -> str:
        """Uppercase hex SHA-1 digest of the DER-encoded certificate."""
        return self.certificate.fingerprint(hashes.SHA1()).hex().upper()

    @property
    def subject(self) -> str:
        return self.certificate.subject.rfc4514_string()

    @property
    def issuer(self) -> str:
        return self.certificate.issuer.rfc4514_string()

    @property
    def serial_number(self) -> str:
        return format(self.certificate.serial_number, "X")

    @property
    def not_before(self) -> datetime.datetime:
        return self.certificate.not_valid_before_utc

    @property
    def not_after(self) -> datetime.datetime:
        return self.certificate.not_valid_after_utc

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    @property
    def der_bytes(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.DER)

    def summary(self) -> CertificateSummary:
        """Return the descriptive fields shown by ``list``."""
        return CertificateSummary(
            subject=self.subject,
            issuer=self.issuer,
            serial_number=self.serial_number,
            not_before=self.not_before,
            not_after=self.not_after,
            thumbprint=self.thumbprint,
            signature_algorithm=_oid_label(self.certificate.signature_algorithm_oid),
            public_key_algorithm=_oid_label(self.certificate.public_key_algorithm_oid),
            has_private_key=self.has_private_key,
        )

    def matches(self, other: "CertificateCredential") -> bool:
        """Return True when both credentials wrap the same encoded certificate."""
        return self.der_bytes == other.der_bytes

    # ------------------------------------------------------------------
    # Key binding and PKCS#12 export
    # ------------------------------------------------------------------

    def with_private_key(self, private_key: PrivateKeyTypes) -> "CertificateCredential":
        """Return an exportable copy of this credential bound to *private_key*.

        Raises
        ------
        KeyDecodeError
            If *private_key* does not belong to this certificate's public key.
        """
        spki = serialization.PublicFormat.SubjectPublicKeyInfo
        cert_public = self.certificate.public_key().public_bytes(serialization.Encoding.DER, spki)
        key_public = private_key.public_key().public_bytes(serialization.Encoding.DER, spki)
        if cert_public != key_public:
            raise KeyDecodeError("Private key does not match the certificate's public key.")
        return CertificateCredential(
            certificate=self.certificate,
            private_key=private_key,
            key_storage=KeyStorage.EXPORTABLE,
            friendly_name=self.friendly_name,
        )

    def export_pkcs12(self, password: Optional[Union[str, bytes]] = None) -> bytes:
        """Serialize the credential as PKCS#12, encrypted when *password* is set.

        Raises
        ------
        CertificateLoadError
            If the credential holds a private key loaded with
            KeyStorage.DEFAULT, which is not exportable.
        """
        if self.private_key is not None and self.key_storage is not KeyStorage.EXPORTABLE:
            raise CertificateLoadError(
                f"Private key of certificate '{self.thumbprint}' is not exportable."
            )
        return self.to_pkcs12_bytes(password)

    def to_pkcs12_bytes(self, password: Optional[Union[str, bytes]] = None) -> bytes:
        """Serialize the credential as PKCS#12 regardless of key storage mode.

        Used by store backends, which hold key material on the credential's
        behalf.
        """
        secret = _password_bytes(password)
        encryption: serialization.KeySerializationEncryption = (
            serialization.BestAvailableEncryption(secret)
            if secret
            else serialization.NoEncryption()
        )
        name = self.friendly_name.encode("utf-8") if self.friendly_name else None
        return pkcs12.serialize_key_and_certificates(
            name=name,
            key=self.private_key,
            cert=self.certificate,
            cas=None,
            encryption_algorithm=encryption,
        )
