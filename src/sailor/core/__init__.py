"""
Core abstractions for the Sailor resource synchronization client.
"""

from .models import (
    ResourceKind, FetchStrategy, ResourceDeclaration, ConnectionContext,
    WatchRegistration, Snapshot,
)
from .connector import Connector, ConnectorRequest, ConnectorResponse
from .exceptions import (
    SailorError,
    SailorConfigError,
    EmptyResourceListError,
    InvalidResourceError,
    MissingConnectionFieldError,
    MissingAddressError,
    MissingNamespaceError,
    MissingAppError,
    MissingAccessKeyError,
    MissingSecretKeyError,
    AcquisitionError,
    DecodeError,
    SecretDecodeError,
    FallbackExhaustedError,
    NotLoadedError,
    ConfigNotLoadedError,
    SecretsNotLoadedError,
    ResourceKeyError,
    ConfigKeyNotFoundError,
    SecretKeyNotFoundError,
    MiscNotFoundError,
)

__all__ = [
    "ResourceKind",
    "FetchStrategy",
    "ResourceDeclaration",
    "ConnectionContext",
    "WatchRegistration",
    "Snapshot",
    "Connector",
    "ConnectorRequest",
    "ConnectorResponse",
    "SailorError",
    "SailorConfigError",
    "EmptyResourceListError",
    "InvalidResourceError",
    "MissingConnectionFieldError",
    "MissingAddressError",
    "MissingNamespaceError",
    "MissingAppError",
    "MissingAccessKeyError",
    "MissingSecretKeyError",
    "AcquisitionError",
    "DecodeError",
    "SecretDecodeError",
    "FallbackExhaustedError",
    "NotLoadedError",
    "ConfigNotLoadedError",
    "SecretsNotLoadedError",
    "ResourceKeyError",
    "ConfigKeyNotFoundError",
    "SecretKeyNotFoundError",
    "MiscNotFoundError",
]
