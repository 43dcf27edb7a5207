"""
Snapshot store holding the live value of each resource category.

Writers serialize on a lock and publish by replacing a whole immutable
object with one reference assignment. Readers never take the lock: they
read the current reference once and see either the value from before a
commit or the value from after it.
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..core.exceptions import ConfigNotLoadedError, NotLoadedError, SecretsNotLoadedError
from ..core.logging import resource_context
from ..core.models import ResourceKind, Snapshot


logger = logging.getLogger(__name__)


EMPTY_MISC: Mapping[str, bytes] = MappingProxyType({})


class SnapshotStore:
    """
    One live snapshot per resource category.

    Misc entries are committed one name at a time; each commit publishes
    a fresh read-only mapping that overlays the changed entry on the
    previous mapping, so sibling entries are never lost.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._version = 0
        # Replaced wholesale on every commit, never mutated in place
        self._snapshots: Mapping[ResourceKind, Snapshot] = MappingProxyType({})

    def _install(self, kind: ResourceKind, value: Any) -> Snapshot:
        # Caller holds self._lock
        self._version += 1
        snapshot = Snapshot(kind=kind, value=value, version=self._version)
        snapshots: Dict[ResourceKind, Snapshot] = dict(self._snapshots)
        snapshots[kind] = snapshot
        self._snapshots = MappingProxyType(snapshots)
        return snapshot

    def commit(self, kind: ResourceKind, value: Any) -> Snapshot:
        """
        Replace the live snapshot of a category.

        For misc, `value` must be a complete name to bytes mapping; use
        commit_misc to update a single entry.

        Returns:
            The newly installed snapshot
        """
        if kind == ResourceKind.MISC:
            value = MappingProxyType(dict(value))

        with self._lock:
            snapshot = self._install(kind, value)

        logger.debug(
            f"Committed {kind.value} snapshot v{snapshot.version}",
            extra=resource_context(kind),
        )
        return snapshot

    def commit_misc(self, name: str, data: bytes) -> Snapshot:
        """
        Publish one misc entry, keeping every other committed entry.

        Returns:
            The newly installed misc snapshot
        """
        with self._lock:
            current = self._snapshots.get(ResourceKind.MISC)
            entries = dict(current.value) if current is not None else {}
            entries[name] = bytes(data)
            snapshot = self._install(ResourceKind.MISC, MappingProxyType(entries))

        logger.debug(
            f"Committed misc {name} in snapshot v{snapshot.version}",
            extra=resource_context(ResourceKind.MISC, name),
        )
        return snapshot

    def read(self, kind: ResourceKind) -> Optional[Snapshot]:
        """Current snapshot of a category, or None if nothing was committed yet."""
        return self._snapshots.get(kind)

    def value(self, kind: ResourceKind) -> Any:
        """
        Current value of a category.

        Misc reads never fail: before any commit they return an empty
        mapping.

        Raises:
            ConfigNotLoadedError: For config before the first commit
            SecretsNotLoadedError: For secrets before the first commit
        """
        snapshot = self.read(kind)
        if snapshot is not None:
            return snapshot.value

        if kind == ResourceKind.CONFIG:
            raise ConfigNotLoadedError()
        if kind == ResourceKind.SECRET:
            raise SecretsNotLoadedError()
        if kind == ResourceKind.MISC:
            return EMPTY_MISC
        raise NotLoadedError(f"{kind} is not loaded")

    def is_loaded(self, kind: ResourceKind) -> bool:
        return self.read(kind) is not None

    @property
    def version(self) -> int:
        """Publication counter of the most recent commit (0 before any)."""
        return self._version
