"""Tests for certificate_tool.stores.operator — list/add/remove with verification."""
from __future__ import annotations

from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa

from certificate_tool.certificates.credential import CertificateCredential
from certificate_tool.errors import ArgumentError, NotFoundError, VerificationError
from certificate_tool.stores.base import CertStore
from certificate_tool.stores.enums import OpenFlags, StoreLocation, StoreName
from certificate_tool.stores.filesystem import FilesystemCertStore
from certificate_tool.stores.operator import StoreOperator

MY = StoreName.MY
USER = StoreLocation.CURRENT_USER


class TrackingStore(FilesystemCertStore):
    """FilesystemCertStore that records every open/close."""

    events: list[str] = []

    def _open(self, flags: OpenFlags) -> None:
        TrackingStore.events.append(f"open:{flags.value}")
        super()._open(flags)

    def _close(self) -> None:
        TrackingStore.events.append("close")
        super()._close()


class DroppingStore(TrackingStore):
    """Accepts adds without persisting them."""

    def _add(self, credential: CertificateCredential) -> None:
        pass


class StickyStore(TrackingStore):
    """Accepts removes without deleting anything."""

    def _remove(self, credential: CertificateCredential) -> None:
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_events() -> None:
    TrackingStore.events = []


@pytest.fixture()
def messages() -> list[str]:
    return []


def _operator(store_root: Path, messages: list[str], store_cls: type[CertStore] = TrackingStore) -> StoreOperator:
    return StoreOperator(
        lambda name, location: store_cls(store_root / location.value, name, location),
        reporter=messages.append,
    )


@pytest.fixture()
def operator(store_root: Path, messages: list[str]) -> StoreOperator:
    return _operator(store_root, messages)


@pytest.fixture()
def credential(rsa_key: rsa.RSAPrivateKey, rsa_cert: x509.Certificate) -> CertificateCredential:
    return CertificateCredential(certificate=rsa_cert, private_key=rsa_key)


@pytest.fixture()
def other_credential(ec_cert: x509.Certificate) -> CertificateCredential:
    return CertificateCredential(certificate=ec_cert)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


class TestList:
    def test_empty_store(self, operator: StoreOperator) -> None:
        with operator.list_certificates(MY, USER) as listing:
            assert listing.count == 0
            assert list(listing.entries) == []
            assert listing.name is MY
            assert listing.location is USER

    def test_opens_read_only_and_closes(self, operator: StoreOperator) -> None:
        with operator.list_certificates(MY, USER):
            assert TrackingStore.events == ["open:ReadOnly"]
        assert TrackingStore.events == ["open:ReadOnly", "close"]

    def test_entries_are_one_pass(
        self, operator: StoreOperator, credential: CertificateCredential
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        with operator.list_certificates(MY, USER) as listing:
            assert [s.thumbprint for s in listing.entries] == [credential.thumbprint]
            assert list(listing.entries) == []

    def test_listing_twice_is_identical(
        self,
        operator: StoreOperator,
        credential: CertificateCredential,
        other_credential: CertificateCredential,
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        operator.add_certificate(other_credential, MY, USER)
        assert operator.snapshot(MY, USER) == operator.snapshot(MY, USER)

    def test_closes_when_consumer_raises(self, operator: StoreOperator) -> None:
        with pytest.raises(RuntimeError):
            with operator.list_certificates(MY, USER):
                raise RuntimeError("consumer failed")
        assert TrackingStore.events[-1] == "close"


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    def test_add_then_list(
        self, operator: StoreOperator, credential: CertificateCredential
    ) -> None:
        summary = operator.add_certificate(credential, MY, USER)
        entries = operator.snapshot(MY, USER)
        assert [e.thumbprint for e in entries] == [credential.thumbprint]
        assert summary == entries[0]

    def test_reports_progress(
        self, operator: StoreOperator, credential: CertificateCredential, messages: list[str]
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        assert messages[0].startswith(f"Adding certificate '{credential.thumbprint}'")
        assert "'My' certificate store (location: CurrentUser)" in messages[0]
        assert messages[-1] == "Done."

    def test_add_is_duplicate_safe(
        self, operator: StoreOperator, credential: CertificateCredential
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        operator.add_certificate(credential, MY, USER)
        assert len(operator.snapshot(MY, USER)) == 1

    def test_add_respects_location(
        self, operator: StoreOperator, credential: CertificateCredential
    ) -> None:
        operator.add_certificate(credential, MY, StoreLocation.LOCAL_MACHINE)
        assert operator.snapshot(MY, USER) == []
        assert len(operator.snapshot(MY, StoreLocation.LOCAL_MACHINE)) == 1

    def test_silent_insert_failure_raises_verification_error(
        self,
        store_root: Path,
        messages: list[str],
        credential: CertificateCredential,
    ) -> None:
        operator = _operator(store_root, messages, DroppingStore)
        with pytest.raises(VerificationError) as excinfo:
            operator.add_certificate(credential, MY, USER)
        assert excinfo.value.thumbprint == credential.thumbprint
        assert TrackingStore.events == ["open:ReadWrite", "close"]
        assert "Done." not in messages


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------


class TestRemove:
    def test_remove_by_thumbprint(
        self, operator: StoreOperator, credential: CertificateCredential
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        removed = operator.remove_certificate(MY, USER, thumbprint=credential.thumbprint.lower())
        assert removed == 1
        assert operator.snapshot(MY, USER) == []

    def test_remove_by_exact_match(
        self,
        operator: StoreOperator,
        credential: CertificateCredential,
        other_credential: CertificateCredential,
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        operator.add_certificate(other_credential, MY, USER)
        public_copy = CertificateCredential(certificate=credential.certificate)
        operator.remove_certificate(MY, USER, credential=public_copy)
        assert [e.thumbprint for e in operator.snapshot(MY, USER)] == [other_credential.thumbprint]

    def test_remove_missing_raises_not_found_and_leaves_store(
        self,
        operator: StoreOperator,
        credential: CertificateCredential,
        other_credential: CertificateCredential,
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        before = operator.snapshot(MY, USER)
        with pytest.raises(NotFoundError) as excinfo:
            operator.remove_certificate(MY, USER, thumbprint=other_credential.thumbprint)
        assert excinfo.value.thumbprint == other_credential.thumbprint
        assert operator.snapshot(MY, USER) == before

    def test_remove_missing_by_exact_match(
        self, operator: StoreOperator, other_credential: CertificateCredential
    ) -> None:
        with pytest.raises(NotFoundError):
            operator.remove_certificate(MY, USER, credential=other_credential)

    def test_not_found_still_closes_store(self, operator: StoreOperator) -> None:
        with pytest.raises(NotFoundError):
            operator.remove_certificate(MY, USER, thumbprint="AB" * 20)
        assert TrackingStore.events == ["open:ReadWrite", "close"]

    def test_requires_a_target(self, operator: StoreOperator) -> None:
        with pytest.raises(ArgumentError):
            operator.remove_certificate(MY, USER)
        assert TrackingStore.events == []

    def test_conflicting_targets_raise(
        self,
        operator: StoreOperator,
        credential: CertificateCredential,
        other_credential: CertificateCredential,
    ) -> None:
        with pytest.raises(ArgumentError, match="does not match"):
            operator.remove_certificate(
                MY, USER, thumbprint=other_credential.thumbprint, credential=credential
            )

    def test_silent_remove_failure_raises_verification_error(
        self,
        store_root: Path,
        messages: list[str],
        credential: CertificateCredential,
    ) -> None:
        _operator(store_root, messages).add_certificate(credential, MY, USER)
        TrackingStore.events = []
        operator = _operator(store_root, messages, StickyStore)
        with pytest.raises(VerificationError, match="removed"):
            operator.remove_certificate(MY, USER, thumbprint=credential.thumbprint)
        assert TrackingStore.events == ["open:ReadWrite", "close"]

    def test_reports_progress(
        self, operator: StoreOperator, credential: CertificateCredential, messages: list[str]
    ) -> None:
        operator.add_certificate(credential, MY, USER)
        messages.clear()
        operator.remove_certificate(MY, USER, thumbprint=credential.thumbprint)
        assert messages == [
            f"Removing certificate '{credential.thumbprint}' from 'My' certificate store "
            "(location: CurrentUser)...",
            "Done.",
        ]
