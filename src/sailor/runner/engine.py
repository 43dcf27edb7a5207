"""
Resource synchronization engine.

Resolves every declared resource at startup, then keeps them fresh:
mounted resources through the change watcher, repeated remote pulls
through one poll loop each. All results land in the snapshot store,
which the reader exposes to application code.
"""

import hashlib
import logging
from typing import Callable, Dict, List, Optional, Sequence

from watchdog.observers import Observer

from ..connectors.http import HttpConnector
from ..core.connector import Connector
from ..core.exceptions import (
    AcquisitionError,
    DecodeError,
    EmptyResourceListError,
    FallbackExhaustedError,
    SailorError,
)
from ..core.logging import resource_context
from ..core.models import (
    ConnectionContext,
    FetchStrategy,
    ResourceDeclaration,
    ResourceKind,
    Snapshot,
    WatchRegistration,
)
from ..facade import SailorReader
from ..sources.codec import Decoder, ResourceCodec
from ..sources.fallback import FallbackResolver
from ..sources.mounted import MountedPathSource
from ..sources.remote import RemotePullSource
from ..store.snapshot_store import SnapshotStore
from .poller import PollLoop
from .watcher import ChangeWatcher


logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Keeps configuration, secrets and misc resources synchronized.

    Each engine owns its store, watcher and poll loops, so several engines
    with different connections can live in one process.

    Example:
        >>> engine = SyncEngine([config_map_default(), secrets_default()])
        >>> reader = engine.start()
        >>> reader.get("feature_flag")
    """

    def __init__(
        self,
        resources: Sequence[ResourceDeclaration],
        connection: Optional[ConnectionContext] = None,
        connector: Optional[Connector] = None,
        config_decoder: Optional[Decoder] = None,
        secret_decoder: Optional[Decoder] = None,
        fallback_base_url: Optional[str] = None,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        """
        Validate the configuration and build the engine. Nothing is fetched yet.

        Args:
            resources: Resources to synchronize, acquired in this order
            connection: Connection identity; read from SAILOR_* env vars if omitted
            connector: HTTP capability (defaults to an HttpConnector)
            config_decoder: Turns the config JSON document into the config value
            secret_decoder: Turns the plaintext secret mapping into the secrets value
            fallback_base_url: Fallback origin; SAILOR_FALLBACK_BASE_URL if omitted
            observer_factory: Builds the watchdog observer for the change watcher

        Raises:
            EmptyResourceListError: If no resources are declared
            MissingConnectionFieldError: If a connection field is empty
            InvalidResourceError: If a declaration is incomplete
        """
        if not resources:
            raise EmptyResourceListError()

        if connection is None:
            connection = ConnectionContext.from_env()
        else:
            connection.validate()

        for declaration in resources:
            declaration.validate()

        self.resources = tuple(resources)
        self.connection = connection

        self._owns_connector = connector is None
        self.connector = connector or HttpConnector(timeout=connection.socket_timeout)

        self.store = SnapshotStore()
        self.reader = SailorReader(self.store)
        self.codec = ResourceCodec(connection, config_decoder, secret_decoder)
        self.mounted = MountedPathSource(connection)
        self.remote = RemotePullSource(connection, self.connector)
        if fallback_base_url is None:
            self.fallback = FallbackResolver.from_env(connection, self.connector)
        else:
            self.fallback = FallbackResolver(connection, self.connector, fallback_base_url)
        self.watcher = ChangeWatcher(self._reingest, observer_factory)
        self.poll_loops: List[PollLoop] = []
        # Last committed content per watched file; a write fires several events
        self._mounted_digests: Dict[ResourceDeclaration, str] = {}
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> SailorReader:
        """
        Acquire every declared resource, then start background refresh.

        Resources are acquired in declaration order on the calling thread.
        The watcher and poll loops start only after all of them succeed.

        Returns:
            The reader for this engine

        Raises:
            FallbackExhaustedError: If a resource could not be served by its
                primary source nor by the fallback
        """
        if self._started:
            return self.reader

        pending_loops: List[PollLoop] = []
        for declaration in self.resources:
            loop = self._acquire(declaration)
            if loop is not None:
                pending_loops.append(loop)

        if self.watcher.has_registrations:
            self.watcher.start()
        for loop in pending_loops:
            loop.start()

        self.poll_loops = pending_loops
        self._started = True

        logger.info(
            f"Sailor engine started for {self.connection.namespace}/{self.connection.app}: "
            f"{len(self.resources)} resources, {len(self.watcher.directories)} watched directories, "
            f"{len(self.poll_loops)} poll loops"
        )
        return self.reader

    def stop(self) -> None:
        """
        Stop the watcher and poll loops.

        Processes normally never call this; it lets tests and embedding
        code tear an engine down.
        """
        self.watcher.stop()
        for loop in self.poll_loops:
            loop.stop()
        if self._owns_connector:
            self.connector.close()
        self._started = False

    def __enter__(self) -> SailorReader:
        return self.start()

    def __exit__(self, *args) -> None:
        self.stop()

    def _acquire(self, declaration: ResourceDeclaration) -> Optional[PollLoop]:
        """
        Initial acquisition of one resource.

        Returns:
            A poll loop to start once startup completes, if the resource
            needs one
        """
        context = resource_context(declaration.kind, declaration.name, declaration.strategy)

        try:
            if declaration.strategy == FetchStrategy.MOUNTED_PATH:
                raw = self.mounted.read(declaration)
                self.ingest(declaration, raw, enveloped=True)
                if not declaration.once:
                    self._mounted_digests[declaration] = hashlib.sha256(raw).hexdigest()
                    self.watcher.register(self.mounted.registration(declaration))
                return None

            raw = self.remote.fetch(declaration)
            self.ingest(declaration, raw, enveloped=False)
        except (AcquisitionError, DecodeError) as e:
            logger.warning(
                f"Primary source for {declaration.describe()} failed, trying fallback: {e}",
                extra=context,
            )
            self._acquire_from_fallback(declaration, e)
            return None

        if declaration.once:
            return None
        return PollLoop(declaration, self.refresh)

    def _acquire_from_fallback(self, declaration: ResourceDeclaration, primary_error: SailorError) -> Snapshot:
        raw = self.fallback.fetch(declaration, primary_error)
        try:
            return self.ingest(declaration, raw, enveloped=False)
        except DecodeError as e:
            raise FallbackExhaustedError(
                f"cannot serve {declaration.describe()}: fallback payload is malformed: {e}",
                resource=declaration.describe(),
                primary_error=primary_error,
            ) from e

    def ingest(self, declaration: ResourceDeclaration, raw: bytes, enveloped: bool = False) -> Snapshot:
        """
        Decode raw bytes for a resource and commit the result.

        Raises:
            DecodeError: If the bytes cannot be decoded; nothing is committed
        """
        value = self.codec.decode(declaration.kind, raw, enveloped)
        if declaration.kind == ResourceKind.MISC:
            snapshot = self.store.commit_misc(declaration.name, value)
        else:
            snapshot = self.store.commit(declaration.kind, value)

        logger.debug(
            f"Ingested {declaration.describe()} as snapshot v{snapshot.version}",
            extra=resource_context(declaration.kind, declaration.name, declaration.strategy),
        )
        return snapshot

    def refresh(self, declaration: ResourceDeclaration) -> Snapshot:
        """
        Re-fetch a remote resource and commit it. Used by the poll loops.

        Raises:
            AcquisitionError: If the backend is unavailable
            DecodeError: If the payload is malformed
        """
        raw = self.remote.fetch(declaration)
        return self.ingest(declaration, raw, enveloped=False)

    def _reingest(self, registration: WatchRegistration) -> None:
        declaration = registration.declaration
        context = resource_context(registration.kind, registration.resource_name,
                                   FetchStrategy.MOUNTED_PATH)
        try:
            raw = self.mounted.read(declaration)
            digest = hashlib.sha256(raw).hexdigest()
            if self._mounted_digests.get(declaration) == digest:
                logger.debug(f"{declaration.describe()} unchanged, skipping reload", extra=context)
                return
            snapshot = self.ingest(declaration, raw, enveloped=True)
            self._mounted_digests[declaration] = digest
        except SailorError as e:
            logger.warning(
                f"{declaration.describe()} changed but could not be reloaded, "
                f"keeping previous snapshot: {e}",
                extra=context,
            )
            return

        logger.info(
            f"Reloaded {declaration.describe()} from {registration.filesystem_path} "
            f"(snapshot v{snapshot.version})",
            extra=context,
        )
