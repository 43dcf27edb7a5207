"""
Sailor client: keeps a process's configuration, secrets and misc
resources synchronized with a mounted volume or the Sailor backend.
"""

from .core import (
    ResourceKind,
    FetchStrategy,
    ResourceDeclaration,
    ConnectionContext,
    SailorError,
    SailorConfigError,
    FallbackExhaustedError,
    NotLoadedError,
    ResourceKeyError,
)
from .defaults import (
    config_map_default,
    secrets_default,
    misc_once_default,
    config_pull_default,
    secrets_pull_default,
    misc_pull_default,
)
from .facade import SailorReader
from .runner import SyncEngine
from .config import SailorConfig

__version__ = "0.1.0"

__all__ = [
    "ResourceKind",
    "FetchStrategy",
    "ResourceDeclaration",
    "ConnectionContext",
    "SailorError",
    "SailorConfigError",
    "FallbackExhaustedError",
    "NotLoadedError",
    "ResourceKeyError",
    "config_map_default",
    "secrets_default",
    "misc_once_default",
    "config_pull_default",
    "secrets_pull_default",
    "misc_pull_default",
    "SailorReader",
    "SyncEngine",
    "SailorConfig",
]
