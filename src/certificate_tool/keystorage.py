"""Key storage mode for loaded credentials, resolved from the host platform."""
from __future__ import annotations

import platform
from enum import Enum
from typing import Optional


class KeyStorage(str, Enum):
    """How private keys of loaded credentials are held.

    DEFAULT     — Key material stays bound to the credential and cannot be
                  exported again.
    EXPORTABLE  — Key material may be re-exported as PKCS#12. Required on
                  macOS, where default key storage goes through the user
                  keychain and triggers an access prompt.
    """

    DEFAULT = "default"
    EXPORTABLE = "exportable"


def resolve_key_storage(system: Optional[str] = None) -> KeyStorage:
    """Return the KeyStorage mode for the host platform.

    Parameters
    ----------
    system:
        Platform name as returned by :func:`platform.system`. Detected when
        omitted.
    """
    system = system if system is not None else platform.system()
    if system == "Darwin":
        return KeyStorage.EXPORTABLE
    return KeyStorage.DEFAULT
