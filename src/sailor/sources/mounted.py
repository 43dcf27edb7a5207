"""
Mounted-path source: resources read from a platform-injected volume.
"""

import logging
from pathlib import Path

from ..core.exceptions import AcquisitionError
from ..core.models import ConnectionContext, ResourceDeclaration, ResourceKind, WatchRegistration


logger = logging.getLogger(__name__)


def resource_file_name(app: str, kind: ResourceKind, name: str = "") -> str:
    """
    File name of a resource inside its mount directory.

    Examples: `<app>-config`, `<app>-secret`, `<app>-<name>-misc`.
    """
    if kind == ResourceKind.MISC:
        return f"{app}-{name}-{kind.value}"
    return f"{app}-{kind.value}"


class MountedPathSource:
    """Reads resources from files in a mounted directory."""

    def __init__(self, connection: ConnectionContext):
        self.connection = connection

    def file_path(self, declaration: ResourceDeclaration) -> Path:
        file_name = resource_file_name(self.connection.app, declaration.kind, declaration.name)
        return Path(declaration.path) / file_name

    def read(self, declaration: ResourceDeclaration) -> bytes:
        """
        Read the raw bytes of a mounted resource.

        Raises:
            AcquisitionError: If the file is missing or unreadable
        """
        path = self.file_path(declaration)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise AcquisitionError(
                f"cannot read {path}: {e.strerror or e}",
                resource=declaration.describe(),
                origin=str(path),
            ) from e

        logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    def registration(self, declaration: ResourceDeclaration) -> WatchRegistration:
        """Watch registration for a successfully read resource."""
        path = self.file_path(declaration)
        return WatchRegistration(
            resource_name=declaration.name,
            kind=declaration.kind,
            filesystem_path=str(path.absolute()),
            declaration=declaration,
        )
