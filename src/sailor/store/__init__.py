"""
In-memory snapshot store.
"""

from .snapshot_store import SnapshotStore, EMPTY_MISC

__all__ = ["SnapshotStore", "EMPTY_MISC"]
