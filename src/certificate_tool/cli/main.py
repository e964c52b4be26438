"""CLI entry point for certificate-tool.

Invoked as::

    certificate-tool [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m certificate_tool.cli.main

Commands
--------
add       Install a certificate (PFX file, base64 blob or PEM pair) into a store
remove    Remove a certificate from a store by thumbprint or exact match
list      List the certificates in a store
version   Show version information

Store names and locations are validated here; an unknown value is a usage
error and no store is touched. Failures raised by the store operations are
not caught: they end the process with a traceback and a non-zero status.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Callable, Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from certificate_tool.config import LOG_LEVELS, Settings, ToolProfile, load_settings
from certificate_tool.errors import ArgumentError, VerificationError
from certificate_tool.stores.enums import StoreLocation, StoreName

if TYPE_CHECKING:
    from certificate_tool.certificates.assembler import CertificateAssembler
    from certificate_tool.stores.operator import StoreOperator

console = Console(soft_wrap=True, highlight=False, emoji=False)

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    """Per-invocation state shared by the subcommands."""

    profile: ToolProfile
    settings: Settings


# ------------------------------------------------------------------
# Option helpers
# ------------------------------------------------------------------


def _parse_store_name(ctx: click.Context, param: click.Parameter, value: str) -> StoreName:
    try:
        return StoreName.parse(value)
    except ArgumentError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def _parse_store_location(ctx: click.Context, param: click.Parameter, value: str) -> StoreLocation:
    try:
        return StoreLocation.parse(value)
    except ArgumentError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def _store_options(profile: ToolProfile) -> Callable[[Callable], Callable]:
    """Attach --store-name / --store-location unless the profile fixes them."""

    def decorator(func: Callable) -> Callable:
        if not profile.store_location_fixed:
            func = click.option(
                "--store-location",
                "-l",
                default=profile.default_store_location.value,
                show_default=True,
                callback=_parse_store_location,
                help="Certificate store location (CurrentUser, LocalMachine).",
            )(func)
        if not profile.store_name_fixed:
            func = click.option(
                "--store-name",
                "-s",
                default=profile.default_store_name.value,
                show_default=True,
                callback=_parse_store_name,
                help="Certificate store name (My, Root, CertificateAuthority, ...).",
            )(func)
        return func

    return decorator


def _resolve_store(
    state: CliState,
    store_name: Optional[StoreName],
    store_location: Optional[StoreLocation],
) -> tuple[StoreName, StoreLocation]:
    return (
        store_name or state.profile.default_store_name,
        store_location or state.profile.default_store_location,
    )


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_operator(settings: Settings) -> StoreOperator:
    """Return a StoreOperator over filesystem stores rooted per settings."""
    from certificate_tool.stores.filesystem import FilesystemCertStore
    from certificate_tool.stores.operator import StoreOperator

    def factory(name: StoreName, location: StoreLocation) -> FilesystemCertStore:
        return FilesystemCertStore(
            root=settings.root_for(location),
            name=name,
            location=location,
            key_storage=settings.key_storage,
        )

    return StoreOperator(factory, reporter=partial(console.print, markup=False))


def _build_assembler(settings: Settings) -> CertificateAssembler:
    from certificate_tool.certificates.assembler import CertificateAssembler

    return CertificateAssembler(key_storage=settings.key_storage)


# ------------------------------------------------------------------
# CLI factory
# ------------------------------------------------------------------


def create_cli(
    profile: Optional[ToolProfile] = None,
    settings: Optional[Settings] = None,
) -> click.Group:
    """Build the command group for a tool profile.

    Parameters
    ----------
    profile:
        Variant switches; defaults to a fully selectable profile.
    settings:
        Runtime settings; resolved from the environment on each invocation
        when omitted.
    """
    from certificate_tool import __version__

    profile = profile or ToolProfile()

    @click.group()
    @click.version_option(version=__version__, prog_name="certificate-tool")
    @click.option(
        "--log-level",
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        default=None,
        help="Logging level for diagnostics on stderr.",
    )
    @click.pass_context
    def cli(ctx: click.Context, log_level: Optional[str]) -> None:
        """Add, remove and list X.509 certificates in a certificate store."""
        resolved = settings or load_settings()
        _configure_logging((log_level or resolved.log_level).upper())
        ctx.obj = CliState(profile=profile, settings=resolved)

    # --------------------------------------------------------------
    # version
    # --------------------------------------------------------------

    @cli.command(name="version")
    def version_command() -> None:
        """Show detailed version information."""
        console.print(f"certificate-tool v{__version__}")

    # --------------------------------------------------------------
    # add
    # --------------------------------------------------------------

    def add_source_options(func: Callable) -> Callable:
        if profile.pem_supported:
            func = click.option(
                "--key",
                "-k",
                "key_path",
                type=click.Path(dir_okay=False),
                default=None,
                help="Path to a PEM private key to bind to --cert.",
            )(func)
            func = click.option(
                "--cert",
                "-c",
                "cert_path",
                type=click.Path(dir_okay=False),
                default=None,
                help="Path to a PEM (or DER) public certificate.",
            )(func)
        return func

    @cli.command(name="add")
    @click.option(
        "--file",
        "-f",
        "pfx_path",
        type=click.Path(dir_okay=False),
        default=None,
        help="Path to a PKCS#12 (.pfx/.p12) file.",
    )
    @add_source_options
    @click.option("--base64", "-b", "base64_data", default=None, help="Base64-encoded PKCS#12 data.")
    @click.option(
        "--password",
        "-p",
        required=profile.password_required,
        help="PKCS#12 password, also used as the private key passphrase.",
    )
    @_store_options(profile)
    @click.option(
        "--thumbprint",
        "-t",
        default=None,
        help="Expected thumbprint; the certificate is rejected if it differs.",
    )
    @click.pass_obj
    def add_command(
        state: CliState,
        pfx_path: Optional[str],
        base64_data: Optional[str],
        password: Optional[str],
        thumbprint: Optional[str],
        cert_path: Optional[str] = None,
        key_path: Optional[str] = None,
        store_name: Optional[StoreName] = None,
        store_location: Optional[StoreLocation] = None,
    ) -> None:
        """Install a certificate into the selected store."""
        from certificate_tool.certificates.assembler import CertificateSource
        from certificate_tool.certificates.credential import normalize_thumbprint

        name, location = _resolve_store(state, store_name, store_location)
        source = CertificateSource.from_options(
            pfx_path=pfx_path,
            base64_data=base64_data,
            pem_path=cert_path,
            key_path=key_path,
        )

        console.print(
            f"Installing certificate from {source.describe()} to '{name}' certificate store "
            f"(location: {location})...",
            markup=False,
        )
        credential = _build_assembler(state.settings).assemble(source, password)
        logger.debug(
            "Assembled certificate %s (private key: %s)",
            credential.thumbprint,
            credential.has_private_key,
        )

        if thumbprint and normalize_thumbprint(thumbprint) != credential.thumbprint:
            raise VerificationError(
                credential.thumbprint,
                f"Certificate thumbprint '{credential.thumbprint}' does not match "
                f"expected thumbprint '{normalize_thumbprint(thumbprint)}'.",
            )

        _build_operator(state.settings).add_certificate(credential, name, location)

    # --------------------------------------------------------------
    # remove
    # --------------------------------------------------------------

    @cli.command(name="remove")
    @click.option("--thumbprint", "-t", default=None, help="Thumbprint of the certificate to remove.")
    @click.option(
        "--file",
        "-f",
        "pfx_path",
        type=click.Path(dir_okay=False),
        default=None,
        help="PKCS#12 file of the certificate to remove (exact match).",
    )
    @click.option("--base64", "-b", "base64_data", default=None, help="Base64-encoded PKCS#12 data to remove.")
    @click.option("--password", "-p", default=None, help="Password for --file / --base64.")
    @_store_options(profile)
    @click.pass_obj
    def remove_command(
        state: CliState,
        thumbprint: Optional[str],
        pfx_path: Optional[str],
        base64_data: Optional[str],
        password: Optional[str],
        store_name: Optional[StoreName] = None,
        store_location: Optional[StoreLocation] = None,
    ) -> None:
        """Remove a certificate from the selected store."""
        from certificate_tool.certificates.assembler import CertificateSource

        if not (thumbprint or pfx_path or base64_data):
            raise click.UsageError("Provide --thumbprint, --file or --base64 to select the certificate.")

        name, location = _resolve_store(state, store_name, store_location)
        credential = None
        if pfx_path or base64_data:
            source = CertificateSource.from_options(pfx_path=pfx_path, base64_data=base64_data)
            credential = _build_assembler(state.settings).assemble(source, password)

        _build_operator(state.settings).remove_certificate(
            name, location, thumbprint=thumbprint, credential=credential
        )

    # --------------------------------------------------------------
    # list
    # --------------------------------------------------------------

    @cli.command(name="list")
    @_store_options(profile)
    @click.pass_obj
    def list_command(
        state: CliState,
        store_name: Optional[StoreName] = None,
        store_location: Optional[StoreLocation] = None,
    ) -> None:
        """List all certificates in the selected store."""
        name, location = _resolve_store(state, store_name, store_location)

        with _build_operator(state.settings).list_certificates(name, location) as listing:
            if listing.count == 0:
                console.print(
                    f"No certificates found in '{name}' certificate store (location: {location}).",
                    markup=False,
                )
                return

            console.print(
                f"Certificates stored in '{name}' certificate store (location: {location}):",
                markup=False,
            )
            console.print(f"Total: {listing.count} certificate(s)")
            console.print()
            for index, summary in enumerate(listing.entries, start=1):
                console.print(f"#{index}:")
                for label, value in summary.rows():
                    console.print(f"  {label:<20}: {value}", markup=False)
                console.print()

    return cli


cli = create_cli()


if __name__ == "__main__":
    cli()
