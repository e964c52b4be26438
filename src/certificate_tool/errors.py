"""Error taxonomy for certificate-tool.

Every failure raised by the tool derives from CertificateToolError. Library
exceptions are converted into one of these at the seam where they occur and
are never swallowed; the CLI lets them propagate to the caller.
"""
from __future__ import annotations


class CertificateToolError(Exception):
    """Base class for all certificate-tool errors."""


class ArgumentError(CertificateToolError, ValueError):
    """Raised for a missing or invalid input value (CLI option, enum name)."""


class CertificateSourceError(CertificateToolError):
    """Raised when no usable certificate source was supplied."""


class CertificateLoadError(CertificateToolError):
    """Raised when source bytes cannot be parsed as a certificate.

    A wrong PKCS#12 password surfaces as this error as well.
    """


class KeyDecodeError(CertificateToolError):
    """Raised when private key bytes cannot be decoded.

    Covers malformed bytes, a wrong passphrase for an encrypted key, an
    unrecognized PEM marker, and a key that does not match its certificate.
    """


class StoreAccessError(CertificateToolError):
    """Raised when a certificate store cannot be opened or used in the requested mode."""


class NotFoundError(CertificateToolError):
    """Raised when a certificate to remove is not present in the store.

    Parameters
    ----------
    thumbprint:
        Thumbprint of the certificate that was looked up.
    """

    def __init__(self, thumbprint: str, message: str | None = None) -> None:
        self.thumbprint = thumbprint
        super().__init__(
            message or f"Unable to find certificate '{thumbprint}' in certificate store."
        )


class VerificationError(CertificateToolError):
    """Raised when a post-condition check after add or remove fails.

    Parameters
    ----------
    thumbprint:
        Thumbprint of the certificate that failed verification.
    """

    def __init__(self, thumbprint: str, message: str) -> None:
        self.thumbprint = thumbprint
        super().__init__(message)
