"""Runtime configuration for certificate-tool.

Two layers are resolved once at startup:

ToolProfile
    The variant switches of the command-line tool: whether the store name
    and location are selectable, whether PEM input is offered, and whether
    a password is mandatory.
Settings
    Where stores live on disk for each StoreLocation, which KeyStorage mode
    loaded credentials use, and the default log level. Values come from
    ``CERTIFICATE_TOOL_*`` environment variables with platform defaults.
"""
from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Literal, Mapping, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

from certificate_tool.errors import ArgumentError
from certificate_tool.keystorage import KeyStorage, resolve_key_storage
from certificate_tool.stores.enums import StoreLocation, StoreName

logger = logging.getLogger(__name__)

ENV_PREFIX = "CERTIFICATE_TOOL_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class ToolProfile(BaseModel):
    """Variant switches for the command-line front end."""

    model_config = ConfigDict(frozen=True)

    store_name_fixed: bool = False
    store_location_fixed: bool = False
    pem_supported: bool = True
    password_required: bool = False
    default_store_name: StoreName = StoreName.MY
    default_store_location: StoreLocation = StoreLocation.CURRENT_USER


def _default_current_user_root() -> Path:
    return Path.home() / ".certificate-tool" / "x509stores"


def _default_local_machine_root() -> Path:
    if platform.system() == "Windows":
        program_data = os.environ.get("PROGRAMDATA", r"C:\ProgramData")
        return Path(program_data) / "certificate-tool" / "x509stores"
    return Path("/etc/certificate-tool/x509stores")


class Settings(BaseModel):
    """Resolved runtime settings.

    Parameters
    ----------
    current_user_root:
        Directory holding the per-user stores.
    local_machine_root:
        Directory holding the machine-wide stores.
    key_storage:
        Key storage mode applied to every credential the tool loads.
    log_level:
        Default logging level name for the CLI.
    """

    model_config = ConfigDict(frozen=True)

    current_user_root: Path = Field(default_factory=_default_current_user_root)
    local_machine_root: Path = Field(default_factory=_default_local_machine_root)
    key_storage: KeyStorage = Field(default_factory=lambda: resolve_key_storage())
    log_level: LogLevel = "WARNING"

    def root_for(self, location: StoreLocation) -> Path:
        """Return the directory that holds the stores for *location*."""
        if location is StoreLocation.LOCAL_MACHINE:
            return self.local_machine_root
        return self.current_user_root


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``CERTIFICATE_TOOL_*`` environment variables.

    Parameters
    ----------
    environ:
        Mapping to read instead of :data:`os.environ`.

    Raises
    ------
    ArgumentError
        If the key storage mode or log level is not recognized.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, object] = {}

    current_user_root = environ.get(f"{ENV_PREFIX}CURRENT_USER_ROOT")
    if current_user_root:
        values["current_user_root"] = Path(current_user_root).expanduser()

    local_machine_root = environ.get(f"{ENV_PREFIX}LOCAL_MACHINE_ROOT")
    if local_machine_root:
        values["local_machine_root"] = Path(local_machine_root).expanduser()

    key_storage = environ.get(f"{ENV_PREFIX}KEY_STORAGE")
    if key_storage:
        try:
            values["key_storage"] = KeyStorage(key_storage.strip().lower())
        except ValueError as exc:
            raise ArgumentError(
                f"Invalid {ENV_PREFIX}KEY_STORAGE {key_storage!r}; "
                f"expected one of: {', '.join(k.value for k in KeyStorage)}."
            ) from exc

    log_level = environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        if log_level.strip().upper() not in LOG_LEVELS:
            raise ArgumentError(
                f"Invalid {ENV_PREFIX}LOG_LEVEL {log_level!r}; "
                f"expected one of: {', '.join(LOG_LEVELS)}."
            )
        values["log_level"] = log_level.strip().upper()

    settings = Settings(**values)
    logger.debug("Resolved settings: %s", settings)
    return settings
