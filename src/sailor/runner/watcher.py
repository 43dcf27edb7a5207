"""
Change watcher for mounted-path resources.

One watchdog observer watches the directory holding each mounted file,
not the file itself: mounted volumes are usually updated by swapping a
symlink, which a watch on the file would miss. Events are mapped back to
a registration by file name and re-ingested on the observer thread.
"""

import logging
import os
import threading
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..core.logging import resource_context
from ..core.models import WatchRegistration


logger = logging.getLogger(__name__)


# Entry swapped atomically when a Kubernetes projected volume is updated
VOLUME_SWAP_ENTRY = "..data"


class WatcherState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"
    REINGESTING = "reingesting"
    STOPPED = "stopped"


class _RegistrationEventHandler(FileSystemEventHandler):
    """Forwards file events of a watched directory to the watcher."""

    def __init__(self, watcher: "ChangeWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_modified(self, event: FileSystemEvent) -> None:
        self.watcher.handle_path(event.src_path, event.is_directory)

    def on_created(self, event: FileSystemEvent) -> None:
        self.watcher.handle_path(event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        self.watcher.handle_path(event.dest_path, event.is_directory)

    def on_closed(self, event: FileSystemEvent) -> None:
        self.watcher.handle_path(event.src_path, event.is_directory)


class ChangeWatcher:
    """
    Re-ingests mounted resources when their files change.

    Registrations are added during initial acquisition and never removed.
    Re-ingestion failures are logged; the previous snapshot stays live.
    """

    def __init__(
        self,
        reingest: Callable[[WatchRegistration], None],
        observer_factory: Callable[[], Observer] = Observer,
    ):
        """
        Args:
            reingest: Reads, decodes and commits one registration
            observer_factory: Builds the watchdog observer
        """
        self.reingest = reingest
        self.observer_factory = observer_factory
        self._registrations: Dict[Tuple[str, str], WatchRegistration] = {}
        self._scheduled: Set[str] = set()
        self._observer: Optional[Observer] = None
        self._lock = threading.Lock()
        self._handler = _RegistrationEventHandler(self)
        self.state = WatcherState.IDLE

    @property
    def has_registrations(self) -> bool:
        return bool(self._registrations)

    @property
    def directories(self) -> List[str]:
        return sorted({directory for directory, _ in self._registrations})

    def register(self, registration: WatchRegistration) -> None:
        """Track a mounted file; its directory is watched once the watcher runs."""
        directory = os.path.abspath(registration.directory)
        key = (directory, registration.file_name)

        with self._lock:
            self._registrations[key] = registration
            if self._observer is not None:
                self._schedule(directory)

        logger.debug(
            f"Registered watch for {registration.filesystem_path}",
            extra=resource_context(registration.kind, registration.resource_name),
        )

    def _schedule(self, directory: str) -> None:
        # Caller holds self._lock
        if directory in self._scheduled:
            return
        self._observer.schedule(self._handler, directory, recursive=False)
        self._scheduled.add(directory)
        logger.info(f"Watching directory {directory}")

    def start(self) -> None:
        """Start the observer thread. Runs until the process exits or stop()."""
        with self._lock:
            if self._observer is not None:
                return
            self._observer = self.observer_factory()
            self._observer.daemon = True
            for directory, _ in self._registrations:
                self._schedule(directory)
            self._observer.start()
            self.state = WatcherState.WATCHING

    def stop(self, timeout: float = 2.0) -> None:
        with self._lock:
            observer = self._observer
            self._observer = None
            self._scheduled.clear()
            self.state = WatcherState.STOPPED
        if observer is not None:
            observer.stop()
            observer.join(timeout=timeout)

    def match(self, path: str, is_directory: bool = False) -> List[WatchRegistration]:
        """
        Registrations affected by an event on `path`.

        A file whose name matches a registration in the same directory
        yields that registration. The volume swap entry yields every
        registration in its directory. Anything else yields nothing.
        """
        path = os.path.abspath(os.fsdecode(path))
        directory, file_name = os.path.split(path)

        if file_name == VOLUME_SWAP_ENTRY:
            return [
                registration
                for (reg_directory, _), registration in self._registrations.items()
                if reg_directory == directory
            ]

        if is_directory:
            return []

        registration = self._registrations.get((directory, file_name))
        return [registration] if registration is not None else []

    def handle_path(self, path: str, is_directory: bool = False) -> int:
        """
        Re-ingest every registration affected by an event.

        Returns:
            Number of registrations re-ingested
        """
        matched = self.match(path, is_directory)
        resting_state = self.state
        for registration in matched:
            self.state = WatcherState.REINGESTING
            try:
                self.reingest(registration)
            except Exception:
                logger.exception(
                    f"Re-ingesting {registration.filesystem_path} failed, keeping previous snapshot",
                    extra=resource_context(registration.kind, registration.resource_name),
                )
            finally:
                if self.state == WatcherState.REINGESTING:
                    self.state = resting_state
        return len(matched)
