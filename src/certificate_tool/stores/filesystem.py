"""Filesystem-backed certificate store.

Stores are laid out as one directory per store name under a per-location
root, with one unencrypted PKCS#12 file per certificate named after its
thumbprint::

    <root>/my/0123456789ABCDEF0123456789ABCDEF01234567.pfx

Entries carry the private key when the credential has one, so a credential
read back from the store is equivalent to the one that was added.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from certificate_tool.certificates.credential import CertificateCredential
from certificate_tool.errors import StoreAccessError
from certificate_tool.keystorage import KeyStorage
from certificate_tool.stores.base import CertStore
from certificate_tool.stores.enums import OpenFlags, StoreLocation, StoreName

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".pfx"


class FilesystemCertStore(CertStore):
    """Certificate store kept as PKCS#12 files in a directory.

    Parameters
    ----------
    root:
        Directory holding every store of *location*.
    name:
        Which store to open; its directory is ``root / name.lower()``.
    location:
        Where the store lives.
    key_storage:
        Key storage mode given to credentials read back from the store.
    """

    def __init__(
        self,
        root: Path,
        name: StoreName,
        location: StoreLocation,
        key_storage: KeyStorage = KeyStorage.DEFAULT,
    ) -> None:
        super().__init__(name, location)
        self._root = Path(root)
        self._key_storage = key_storage

    @property
    def directory(self) -> Path:
        """Directory holding this store's entries."""
        return self._root / self.name.value.lower()

    # ------------------------------------------------------------------
    # CertStore hooks
    # ------------------------------------------------------------------

    def _open(self, flags: OpenFlags) -> None:
        directory = self.directory
        if flags is OpenFlags.READ_WRITE:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreAccessError(
                    f"Unable to open certificate store '{self.name}' "
                    f"(location: {self.location}) for writing: {exc}"
                ) from exc
            if not os.access(directory, os.W_OK | os.X_OK):
                raise StoreAccessError(
                    f"Permission denied opening certificate store '{self.name}' "
                    f"(location: {self.location}) for writing: {directory}"
                )
        elif directory.exists() and not os.access(directory, os.R_OK | os.X_OK):
            raise StoreAccessError(
                f"Permission denied opening certificate store '{self.name}' "
                f"(location: {self.location}): {directory}"
            )

    def _close(self) -> None:
        # Entries are written through on add/remove; nothing is buffered.
        pass

    def _iter_certificates(self) -> Iterator[CertificateCredential]:
        for entry in self._entries():
            try:
                data = entry.read_bytes()
            except OSError as exc:
                raise StoreAccessError(f"Unable to read store entry '{entry}': {exc}") from exc
            yield CertificateCredential.from_pkcs12(data, None, self._key_storage)

    def _count(self) -> int:
        return len(self._entries())

    def _add(self, credential: CertificateCredential) -> None:
        path = self._entry_path(credential)
        try:
            path.write_bytes(credential.to_pkcs12_bytes())
        except OSError as exc:
            raise StoreAccessError(f"Unable to write store entry '{path}': {exc}") from exc
        logger.info("Wrote %s", path)

    def _remove(self, credential: CertificateCredential) -> None:
        path = self._entry_path(credential)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreAccessError(f"Unable to delete store entry '{path}': {exc}") from exc
        logger.info("Deleted %s", path)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _entries(self) -> list[Path]:
        directory = self.directory
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if p.suffix == ENTRY_SUFFIX and p.is_file())

    def _entry_path(self, credential: CertificateCredential) -> Path:
        return self.directory / f"{credential.thumbprint}{ENTRY_SUFFIX}"
