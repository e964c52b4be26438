"""certificate-tool — add, remove and list X.509 certificates in a certificate store.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import certificate_tool
>>> certificate_tool.__version__
'0.1.0'

Quick start
-----------
::

    from pathlib import Path

    from certificate_tool import (
        CertificateAssembler, CertificateSource,
        FilesystemCertStore, StoreOperator, StoreName, StoreLocation,
    )

    assembler = CertificateAssembler()
    credential = assembler.assemble(
        CertificateSource.from_options(pfx_path="server.pfx"), password="secret"
    )

    operator = StoreOperator(
        lambda name, location: FilesystemCertStore(Path("stores"), name, location)
    )
    operator.add_certificate(credential, StoreName.MY, StoreLocation.CURRENT_USER)
"""
from __future__ import annotations

__version__: str = "0.1.0"

from certificate_tool.errors import (
    ArgumentError,
    CertificateLoadError,
    CertificateSourceError,
    CertificateToolError,
    KeyDecodeError,
    NotFoundError,
    StoreAccessError,
    VerificationError,
)
from certificate_tool.keystorage import KeyStorage, resolve_key_storage

# ------------------------------------------------------------------
# Certificate loading
# ------------------------------------------------------------------
from certificate_tool.certificates.assembler import CertificateAssembler, CertificateSource, SourceKind
from certificate_tool.certificates.credential import (
    CertificateCredential,
    CertificateSummary,
    normalize_thumbprint,
)
from certificate_tool.certificates.keys import KeyFormat, decode_private_key, read_private_key, split_pem_key

# ------------------------------------------------------------------
# Stores
# ------------------------------------------------------------------
from certificate_tool.stores.base import CertStore
from certificate_tool.stores.enums import OpenFlags, StoreLocation, StoreName
from certificate_tool.stores.filesystem import FilesystemCertStore
from certificate_tool.stores.operator import StoreListing, StoreOperator

# ------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------
from certificate_tool.config import Settings, ToolProfile, load_settings

__all__ = [
    # version
    "__version__",
    # errors
    "ArgumentError",
    "CertificateLoadError",
    "CertificateSourceError",
    "CertificateToolError",
    "KeyDecodeError",
    "NotFoundError",
    "StoreAccessError",
    "VerificationError",
    # certificates
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
    # stores
    "CertStore",
    "FilesystemCertStore",
    "OpenFlags",
    "StoreListing",
    "StoreLocation",
    "StoreName",
    "StoreOperator",
    # configuration
    "KeyStorage",
    "Settings",
    "ToolProfile",
    "load_settings",
    "resolve_key_storage",
]
