"""Store operations — list, add and remove with post-condition checks.

Each operation opens its own store handle, performs one action, verifies
the outcome by thumbprint lookup where it mutated the store, and closes the
handle on every exit path. Nothing is retried: the first failure aborts the
operation and surfaces after the store has been closed.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from certificate_tool.certificates.credential import (
    CertificateCredential,
    CertificateSummary,
    normalize_thumbprint,
)
from certificate_tool.errors import ArgumentError, NotFoundError, VerificationError
from certificate_tool.stores.base import CertStore
from certificate_tool.stores.enums import OpenFlags, StoreLocation, StoreName

logger = logging.getLogger(__name__)

StoreFactory = Callable[[StoreName, StoreLocation], CertStore]
Reporter = Callable[[str], None]


def _log_reporter(message: str) -> None:
    logger.info(message)


@dataclass
class StoreListing:
    """Contents of a store opened for listing.

    Parameters
    ----------
    name:
        The listed store.
    location:
        Where the listed store lives.
    count:
        Number of entries in the store.
    entries:
        One-pass iterator of entry summaries in store-native order. Only
        valid inside the ``with`` block that produced the listing.
    """

    name: StoreName
    location: StoreLocation
    count: int
    entries: Iterator[CertificateSummary]


class StoreOperator:
    """Runs list/add/remove against stores built by a factory.

    Parameters
    ----------
    store_factory:
        Returns an unopened CertStore for a (name, location) pair.
    reporter:
        Receives progress messages emitted before each mutating step.
        Defaults to logging them at INFO level.
    """

    def __init__(self, store_factory: StoreFactory, reporter: Optional[Reporter] = None) -> None:
        self._store_factory = store_factory
        self._report = reporter or _log_reporter

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    @contextmanager
    def list_certificates(
        self,
        name: StoreName,
        location: StoreLocation,
    ) -> Iterator[StoreListing]:
        """Open the store read-only and yield its listing.

        The store stays open until the ``with`` block exits, so the entries
        iterator must be consumed inside it.
        """
        store = self._store_factory(name, location)
        with store.opened(OpenFlags.READ_ONLY):
            yield StoreListing(
                name=name,
                location=location,
                count=store.count(),
                entries=(cert.summary() for cert in store.certificates()),
            )

    def snapshot(self, name: StoreName, location: StoreLocation) -> list[CertificateSummary]:
        """Return the full listing of a store as a list."""
        with self.list_certificates(name, location) as listing:
            return list(listing.entries)

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------

    def add_certificate(
        self,
        credential: CertificateCredential,
        name: StoreName,
        location: StoreLocation,
    ) -> CertificateSummary:
        """Insert *credential* into the store and confirm it is present.

        Raises
        ------
        VerificationError
            If a thumbprint lookup after insertion finds nothing.
        """
        thumbprint = credential.thumbprint
        store = self._store_factory(name, location)
        with store.opened(OpenFlags.READ_WRITE):
            self._report(
                f"Adding certificate '{thumbprint}' to '{name}' certificate store "
                f"(location: {location})..."
            )
            store.add(credential)

            if not store.find_by_thumbprint(thumbprint):
                raise VerificationError(
                    thumbprint, "Unable to validate certificate was added to store."
                )
            self._report("Done.")
        logger.info("Added %s to %s/%s", thumbprint, location, name)
        return credential.summary()

    # ------------------------------------------------------------------
    # remove
    # ------------------------------------------------------------------

    def remove_certificate(
        self,
        name: StoreName,
        location: StoreLocation,
        thumbprint: Optional[str] = None,
        credential: Optional[CertificateCredential] = None,
    ) -> int:
        """Remove the matching certificate(s) and confirm they are gone.

        The target is located by *thumbprint* when given, otherwise by an
        exact match on *credential*.

        Returns
        -------
        int
            Number of entries removed.

        Raises
        ------
        ArgumentError
            If neither target is given, or both are given and disagree.
        NotFoundError
            If nothing in the store matches. The store is left unchanged.
        VerificationError
            If a thumbprint lookup after removal still finds an entry.
        """
        if not thumbprint and credential is None:
            raise ArgumentError("A thumbprint or a certificate is required to remove a certificate.")

        wanted = normalize_thumbprint(thumbprint) if thumbprint else credential.thumbprint
        if credential is not None and credential.thumbprint != wanted:
            raise ArgumentError(
                f"Thumbprint '{wanted}' does not match the supplied certificate "
                f"'{credential.thumbprint}'."
            )

        store = self._store_factory(name, location)
        with store.opened(OpenFlags.READ_WRITE):
            self._report(
                f"Removing certificate '{wanted}' from '{name}' certificate store "
                f"(location: {location})..."
            )
            if thumbprint:
                matches = store.find_by_thumbprint(wanted)
            else:
                matches = [cert for cert in store.certificates() if cert.matches(credential)]
            if not matches:
                raise NotFoundError(wanted)

            store.remove_range(matches)

            if store.find_by_thumbprint(wanted):
                raise VerificationError(
                    wanted, "Unable to validate certificate was removed from store."
                )
            self._report("Done.")
        logger.info("Removed %s from %s/%s (%d entries)", wanted, location, name, len(matches))
        return len(matches)
