"""
Startup sequence and background refresh tasks.
"""

from .engine import SyncEngine
from .poller import PollLoop, PollStats
from .watcher import ChangeWatcher, WatcherState, VOLUME_SWAP_ENTRY

__all__ = [
    "SyncEngine",
    "PollLoop",
    "PollStats",
    "ChangeWatcher",
    "WatcherState",
    "VOLUME_SWAP_ENTRY",
]
