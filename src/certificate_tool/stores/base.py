"""Certificate storage — abstract interface with scoped open/close.

CertStore defines the storage contract shared by every backend. A store is
identified by a (StoreName, StoreLocation) pair, must be opened with an
explicit OpenFlags mode before use, and is closed again by the
:meth:`CertStore.opened` context manager on every exit path.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from certificate_tool.certificates.credential import CertificateCredential, normalize_thumbprint
from certificate_tool.errors import StoreAccessError
from certificate_tool.stores.enums import OpenFlags, StoreLocation, StoreName

logger = logging.getLogger(__name__)


class CertStore(ABC):
    """Abstract base class for certificate store backends.

    Parameters
    ----------
    name:
        Which store to open.
    location:
        Where the store lives.
    """

    def __init__(self, name: StoreName, location: StoreLocation) -> None:
        self._name = name
        self._location = location
        self._flags: Optional[OpenFlags] = None

    @property
    def name(self) -> StoreName:
        return self._name

    @property
    def location(self) -> StoreLocation:
        return self._location

    @property
    def flags(self) -> Optional[OpenFlags]:
        """Mode the store was opened with, or None while closed."""
        return self._flags

    @property
    def is_open(self) -> bool:
        return self._flags is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, flags: OpenFlags) -> None:
        """Open the store in the given mode.

        Raises
        ------
        StoreAccessError
            If the store is already open or the backend refuses access.
        """
        if self.is_open:
            raise StoreAccessError(f"Certificate store '{self._name}' is already open.")
        self._open(flags)
        self._flags = flags
        logger.debug("Opened %s/%s (%s)", self._location, self._name, flags.value)

    def close(self) -> None:
        """Release the store. Closing a closed store is a no-op."""
        if not self.is_open:
            return
        try:
            self._close()
        finally:
            self._flags = None
            logger.debug("Closed %s/%s", self._location, self._name)

    @contextmanager
    def opened(self, flags: OpenFlags) -> Iterator["CertStore"]:
        """Open the store for the duration of a ``with`` block."""
        self.open(flags)
        try:
            yield self
        finally:
            self.close()

    # ------------------------------------------------------------------
    # Queries and mutations
    # ------------------------------------------------------------------

    def certificates(self) -> Iterator[CertificateCredential]:
        """Iterate over every credential in store-native order."""
        self._require_open()
        return self._iter_certificates()

    def count(self) -> int:
        """Return the number of credentials in the store."""
        self._require_open()
        return self._count()

    def find_by_thumbprint(self, thumbprint: str) -> list[CertificateCredential]:
        """Return every credential whose thumbprint equals *thumbprint*.

        The comparison ignores case, spaces and colons.
        """
        self._require_open()
        wanted = normalize_thumbprint(thumbprint)
        return [cert for cert in self._iter_certificates() if cert.thumbprint == wanted]

    def add(self, credential: CertificateCredential) -> None:
        """Insert *credential*, replacing an entry with the same thumbprint.

        Raises
        ------
        StoreAccessError
            If the store is closed or opened read-only.
        """
        self._require_writable()
        self._add(credential)

    def remove(self, credential: CertificateCredential) -> None:
        """Delete *credential* from the store. Absent entries are ignored.

        Raises
        ------
        StoreAccessError
            If the store is closed or opened read-only.
        """
        self._require_writable()
        self._remove(credential)

    def remove_range(self, credentials: list[CertificateCredential]) -> None:
        """Delete every credential in *credentials*."""
        for credential in credentials:
            self.remove(credential)

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _open(self, flags: OpenFlags) -> None:
        """Acquire backend resources for the requested mode."""

    @abstractmethod
    def _close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    def _iter_certificates(self) -> Iterator[CertificateCredential]:
        """Yield stored credentials."""

    @abstractmethod
    def _add(self, credential: CertificateCredential) -> None:
        """Persist a credential."""

    @abstractmethod
    def _remove(self, credential: CertificateCredential) -> None:
        """Delete a credential."""

    def _count(self) -> int:
        return sum(1 for _ in self._iter_certificates())

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if not self.is_open:
            raise StoreAccessError(f"Certificate store '{self._name}' is not open.")

    def _require_writable(self) -> None:
        self._require_open()
        if self._flags is not OpenFlags.READ_WRITE:
            raise StoreAccessError(
                f"Certificate store '{self._name}' (location: {self._location}) "
                "was opened read-only."
            )
