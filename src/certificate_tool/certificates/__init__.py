"""Certificate loading: private key decoding, credentials and assembly.

Turns PFX files, base64 blobs and PEM certificate/key pairs into
CertificateCredential objects ready to be placed in a store.
"""
from __future__ import annotations

from certificate_tool.certificates.assembler import (
    CertificateAssembler,
    CertificateSource,
    SourceKind,
)
from certificate_tool.certificates.credential import (
    CertificateCredential,
    CertificateSummary,
    normalize_thumbprint,
)
from certificate_tool.certificates.keys import (
    KeyFormat,
    decode_private_key,
    read_private_key,
    split_pem_key,
)

__all__ = [
    "CertificateAssembler",
    "CertificateCredential",
    "CertificateSource",
    "CertificateSummary",
    "KeyFormat",
    "SourceKind",
    "decode_private_key",
    "normalize_thumbprint",
    "read_private_key",
    "split_pem_key",
]
