"""Certificate assembly — turn one input source into a CertificateCredential.

Three sources are accepted, checked in this order:

1. a PKCS#12/PFX file path,
2. a base64-encoded PKCS#12 blob,
3. a PEM public certificate path, optionally paired with a PEM private key.

When a private key is paired with a PEM certificate, the key is decoded,
bound to the certificate, and the pair is exported to PKCS#12 with the
supplied password and loaded back. Stores therefore always receive a
credential in the same shape as one read from a PFX file.
"""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from certificate_tool.certificates.credential import CertificateCredential
from certificate_tool.certificates.keys import read_private_key
from certificate_tool.errors import CertificateLoadError, CertificateSourceError
from certificate_tool.keystorage import KeyStorage

logger = logging.getLogger(__name__)


class SourceKind(str, Enum):
    """Which input a CertificateSource was built from."""

    PFX = "pfx"
    BASE64 = "base64"
    PEM = "pem"


@dataclass(frozen=True)
class CertificateSource:
    """Exactly one certificate input, plus an optional PEM private key path.

    Build instances with :meth:`from_options`, which enforces the
    one-source rule.
    """

    kind: SourceKind
    pfx_path: Optional[Path] = None
    base64_data: Optional[str] = None
    pem_path: Optional[Path] = None
    key_path: Optional[Path] = None

    @classmethod
    def from_options(
        cls,
        pfx_path: Optional[Union[str, Path]] = None,
        base64_data: Optional[str] = None,
        pem_path: Optional[Union[str, Path]] = None,
        key_path: Optional[Union[str, Path]] = None,
    ) -> "CertificateSource":
        """Pick the source from command-line style options.

        The first non-empty of *pfx_path*, *base64_data* and *pem_path* wins.

        Raises
        ------
        CertificateSourceError
            If none of the three is set, or *key_path* is given without a
            PEM certificate to bind it to.
        """
        if key_path and not pem_path:
            raise CertificateSourceError(
                "A private key can only be combined with a PEM public certificate."
            )
        if pfx_path:
            return cls(kind=SourceKind.PFX, pfx_path=Path(pfx_path))
        if base64_data:
            return cls(kind=SourceKind.BASE64, base64_data=base64_data)
        if pem_path:
            return cls(
                kind=SourceKind.PEM,
                pem_path=Path(pem_path),
                key_path=Path(key_path) if key_path else None,
            )
        raise CertificateSourceError("Arguments provided are invalid: no certificate source supplied.")

    def describe(self) -> str:
        """Short human-readable origin, used in progress messages."""
        if self.kind is SourceKind.PFX:
            return f"'{self.pfx_path}'"
        if self.kind is SourceKind.BASE64:
            return "base 64 string"
        return f"'{self.pem_path}'"


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise CertificateLoadError(f"Unable to read certificate file '{path}': {exc}") from exc


class CertificateAssembler:
    """Builds CertificateCredential objects from a CertificateSource.

    Parameters
    ----------
    key_storage:
        Key storage mode given to every credential loaded from a container.
    """

    def __init__(self, key_storage: KeyStorage = KeyStorage.DEFAULT) -> None:
        self._key_storage = key_storage

    @property
    def key_storage(self) -> KeyStorage:
        return self._key_storage

    def assemble(
        self,
        source: CertificateSource,
        password: Optional[str] = None,
    ) -> CertificateCredential:
        """Load *source* into a single credential.

        Parameters
        ----------
        source:
            The certificate input.
        password:
            Password of the PKCS#12 container, or passphrase of an encrypted
            private key. Also protects the intermediate PKCS#12 export when a
            PEM key is bound.

        Raises
        ------
        CertificateLoadError
            If the source cannot be read or parsed, or the password is wrong.
        KeyDecodeError
            If the paired private key cannot be decoded or does not match.
        """
        if source.kind is SourceKind.PFX:
            logger.info("Loading PKCS#12 certificate from %s", source.pfx_path)
            return CertificateCredential.from_pkcs12(
                _read_bytes(source.pfx_path), password, self._key_storage
            )

        if source.kind is SourceKind.BASE64:
            logger.info("Loading PKCS#12 certificate from base64 input")
            try:
                data = base64.b64decode("".join(source.base64_data.split()), validate=True)
            except (binascii.Error, ValueError) as exc:
                raise CertificateLoadError(f"Certificate input is not valid base64: {exc}") from exc
            return CertificateCredential.from_pkcs12(data, password, self._key_storage)

        logger.info("Loading public certificate from %s", source.pem_path)
        public = self._load_public(_read_bytes(source.pem_path), password)
        if source.key_path is None:
            return public

        logger.info("Binding private key from %s", source.key_path)
        private_key = read_private_key(source.key_path, password)
        bound = public.with_private_key(private_key)

        logger.debug("Re-packaging certificate %s through PKCS#12", bound.thumbprint)
        exported = bound.export_pkcs12(password)
        return CertificateCredential.from_pkcs12(exported, password, self._key_storage)

    def _load_public(self, data: bytes, password: Optional[str]) -> CertificateCredential:
        """Load PEM or DER certificate bytes, or a PKCS#12 file given in their place."""
        if b"-----BEGIN" in data:
            return CertificateCredential.from_certificate_bytes(data)
        try:
            return CertificateCredential.from_certificate_bytes(data)
        except CertificateLoadError:
            logger.debug("Input is not a DER certificate, trying PKCS#12")
        return CertificateCredential.from_pkcs12(data, password, self._key_storage)
