"""Closed enumerations identifying a certificate store and its access mode.

Store names and locations arrive as free text from the command line. They
are parsed case-insensitively into these enums at the boundary; an unknown
value raises ArgumentError rather than leaking a bare ValueError.
"""
from __future__ import annotations

from enum import Enum

from certificate_tool.errors import ArgumentError


class _NamedEnum(str, Enum):
    """String enum parsed case-insensitively by member value."""

    @classmethod
    def parse(cls, value: str) -> "_NamedEnum":
        """Return the member whose value matches *value*, ignoring case.

        Raises
        ------
        ArgumentError
            If *value* is empty or names no member.
        """
        candidate = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == candidate:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ArgumentError(
            f"Unknown {cls.__name__} {value!r}. Expected one of: {choices}."
        )

    def __str__(self) -> str:
        return self.value


class StoreName(_NamedEnum):
    """Well-known certificate store names."""

    ADDRESS_BOOK = "AddressBook"
    AUTH_ROOT = "AuthRoot"
    CERTIFICATE_AUTHORITY = "CertificateAuthority"
    DISALLOWED = "Disallowed"
    MY = "My"
    ROOT = "Root"
    TRUSTED_PEOPLE = "TrustedPeople"
    TRUSTED_PUBLISHER = "TrustedPublisher"


class StoreLocation(_NamedEnum):
    """Scope of a certificate store: per-user or machine-wide."""

    CURRENT_USER = "CurrentUser"
    LOCAL_MACHINE = "LocalMachine"


class OpenFlags(str, Enum):
    """Access mode requested when opening a store."""

    READ_ONLY = "ReadOnly"
    READ_WRITE = "ReadWrite"
