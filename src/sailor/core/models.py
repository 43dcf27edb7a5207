"""
Core data models for the Sailor resource synchronization client.

These models represent the declared resources, the connection identity
used to reach the Sailor backend, and the immutable snapshots published
to readers.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .exceptions import (
    InvalidResourceError,
    SailorConfigError,
    MissingAccessKeyError,
    MissingAddressError,
    MissingAppError,
    MissingNamespaceError,
    MissingSecretKeyError,
)


ENV_SAILOR_URL = "SAILOR_URL"
ENV_SAILOR_NS = "SAILOR_NS"
ENV_SAILOR_APP = "SAILOR_APP"
ENV_SAILOR_ACCESS_KEY = "SAILOR_ACCESS_KEY"
ENV_SAILOR_SECRET_KEY = "SAILOR_SECRET_KEY"
ENV_SAILOR_SOCKET_TIMEOUT = "SAILOR_SOCKET_TIMEOUT"
ENV_SAILOR_FALLBACK_BASE_URL = "SAILOR_FALLBACK_BASE_URL"

DEFAULT_MOUNT_PATH = "/etc/sailor"
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_SOCKET_TIMEOUT = 30.0


def parse_socket_timeout(value: Any) -> float:
    """
    Socket timeout in seconds from a config or environment value.

    Empty values give the default.

    Raises:
        SailorConfigError: If the value is not a positive number
    """
    if value is None or value == "":
        return DEFAULT_SOCKET_TIMEOUT
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise SailorConfigError(f"socket timeout must be a number of seconds, got {value!r}") from e
    if timeout <= 0:
        raise SailorConfigError(f"socket timeout must be positive, got {value!r}")
    return timeout


class ResourceKind(str, Enum):
    """Category of a synchronized resource."""
    CONFIG = "config"
    SECRET = "secret"
    MISC = "misc"


class FetchStrategy(str, Enum):
    """How a resource is acquired."""
    MOUNTED_PATH = "mounted_path"
    REMOTE_PULL = "remote_pull"


@dataclass(frozen=True)
class ResourceDeclaration:
    """
    A resource the engine keeps synchronized.

    Attributes:
        kind: Resource category
        name: Resource name (required for misc, empty otherwise)
        path: Mount directory, used by the mounted-path strategy
        strategy: Acquisition strategy
        poll_interval: Seconds between pulls for repeated remote pulls
        once: Acquire once and never refresh
        fallback_enabled: Whether the fallback origin may be consulted
    """
    kind: ResourceKind
    name: str = ""
    path: str = DEFAULT_MOUNT_PATH
    strategy: FetchStrategy = FetchStrategy.MOUNTED_PATH
    poll_interval: float = DEFAULT_POLL_INTERVAL
    once: bool = False
    fallback_enabled: bool = True

    def validate(self) -> None:
        """Raise InvalidResourceError if the declaration is unusable."""
        if self.kind == ResourceKind.MISC and not self.name:
            raise InvalidResourceError("misc resources require a name")
        if self.strategy == FetchStrategy.MOUNTED_PATH and not self.path:
            raise InvalidResourceError(
                f"{self.kind.value} resource uses a mounted path but no path was given"
            )
        if self.poll_interval < 0:
            raise InvalidResourceError("poll_interval must not be negative")

    @property
    def effective_poll_interval(self) -> float:
        """Poll interval with the client default applied."""
        return self.poll_interval or DEFAULT_POLL_INTERVAL

    def describe(self) -> str:
        """Short human readable label used in logs and errors."""
        if self.name:
            return f"{self.kind.value}:{self.name}"
        return self.kind.value


@dataclass(frozen=True)
class ConnectionContext:
    """
    Identity and credentials for one app inside one namespace.

    Attributes:
        address: Base address of the Sailor backend
        namespace: Namespace the app belongs to
        app: Application name
        access_key: Access key, also the KEK salt
        secret_key: Secret key, also the KEK password
        socket_timeout: HTTP timeout in seconds
    """
    address: str
    namespace: str
    app: str
    access_key: str
    secret_key: str = field(repr=False)
    socket_timeout: float = DEFAULT_SOCKET_TIMEOUT

    def validate(self) -> None:
        """
        Check that all identity fields are set.

        Fields are checked in order: address, namespace, app, access key,
        secret key. The first missing one raises its own error type.
        """
        if not self.address:
            raise MissingAddressError()
        if not self.namespace:
            raise MissingNamespaceError()
        if not self.app:
            raise MissingAppError()
        if not self.access_key:
            raise MissingAccessKeyError()
        if not self.secret_key:
            raise MissingSecretKeyError()

    @classmethod
    def from_env(cls) -> "ConnectionContext":
        """Build and validate a connection from SAILOR_* environment variables."""
        timeout = os.environ.get(ENV_SAILOR_SOCKET_TIMEOUT)
        context = cls(
            address=os.environ.get(ENV_SAILOR_URL, ""),
            namespace=os.environ.get(ENV_SAILOR_NS, ""),
            app=os.environ.get(ENV_SAILOR_APP, ""),
            access_key=os.environ.get(ENV_SAILOR_ACCESS_KEY, ""),
            secret_key=os.environ.get(ENV_SAILOR_SECRET_KEY, ""),
            socket_timeout=parse_socket_timeout(timeout),
        )
        context.validate()
        return context


@dataclass(frozen=True)
class WatchRegistration:
    """Maps a watched file back to the resource it holds."""
    resource_name: str
    kind: ResourceKind
    filesystem_path: str
    declaration: Optional[ResourceDeclaration] = None

    @property
    def file_name(self) -> str:
        return os.path.basename(self.filesystem_path)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.filesystem_path)


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable published value for one resource category.

    Attributes:
        kind: Category the value belongs to
        value: Decoded value (config object, secrets, or misc mapping)
        version: Monotonic publication counter, unique per store
        committed_at: When the snapshot was installed
    """
    kind: ResourceKind
    value: Any
    version: int
    committed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
