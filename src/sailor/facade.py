"""
Read-only view over the snapshot store used by application code.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any

from .core.exceptions import ConfigKeyNotFoundError, MiscNotFoundError, SecretKeyNotFoundError
from .core.models import ResourceKind
from .store.snapshot_store import SnapshotStore


_MISSING = object()


def _lookup(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)

    # Decoded objects expose their data fields only, never methods or private names
    if key.startswith("_"):
        return _MISSING
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        names = {f.name for f in dataclasses.fields(value)}
        return getattr(value, key) if key in names else _MISSING
    try:
        return vars(value).get(key, _MISSING)
    except TypeError:
        return _MISSING


class SailorReader:
    """
    Reads the current configuration, secrets and misc resources.

    Every call reads the live snapshot once; it never blocks on a writer.
    Config and secret reads raise a NotLoadedError subclass before the
    first successful commit, and a ResourceKeyError subclass for an
    unknown key.
    """

    def __init__(self, store: SnapshotStore):
        self.store = store

    def config(self) -> Any:
        """The whole decoded configuration."""
        return self.store.value(ResourceKind.CONFIG)

    def secrets(self) -> Any:
        """The whole decrypted secret mapping (or decoded secrets object)."""
        return self.store.value(ResourceKind.SECRET)

    def get(self, key: str) -> Any:
        value = _lookup(self.config(), key)
        if value is _MISSING:
            raise ConfigKeyNotFoundError(f"config key {key} not found")
        return value

    def get_secret(self, key: str) -> Any:
        value = _lookup(self.secrets(), key)
        if value is _MISSING:
            raise SecretKeyNotFoundError(f"secret key {key} not found")
        return value

    def get_misc(self, name: str) -> bytes:
        entries = self.store.value(ResourceKind.MISC)
        if name not in entries:
            raise MiscNotFoundError(f"misc resource {name} not found")
        return entries[name]

    def get_misc_text(self, name: str, encoding: str = "utf-8") -> str:
        return self.get_misc(name).decode(encoding)

    def is_loaded(self, kind: ResourceKind) -> bool:
        return self.store.is_loaded(kind)
