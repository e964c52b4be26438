"""Certificate stores: store identity, backends and store operations."""
from __future__ import annotations

from certificate_tool.stores.base import CertStore
from certificate_tool.stores.enums import OpenFlags, StoreLocation, StoreName
from certificate_tool.stores.filesystem import FilesystemCertStore
from certificate_tool.stores.operator import StoreListing, StoreOperator

__all__ = [
    "CertStore",
    "FilesystemCertStore",
    "OpenFlags",
    "StoreListing",
    "StoreLocation",
    "StoreName",
    "StoreOperator",
]
