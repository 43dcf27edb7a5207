"""
Remote-pull source: resources fetched from the Sailor backend API.
"""

import logging
from typing import Optional

from ..core.connector import Connector, ConnectorRequest
from ..core.exceptions import AcquisitionError
from ..core.models import ConnectionContext, ResourceDeclaration, ResourceKind


logger = logging.getLogger(__name__)


def resource_url(connection: ConnectionContext, kind: ResourceKind, name: str = "") -> str:
    """
    Build the backend URL of a resource.

    `{address}/api/v1/resource/{namespace}/{app}/{kind}` with `/{name}`
    appended for misc resources.
    """
    base = connection.address.rstrip("/")
    url = f"{base}/api/v1/resource/{connection.namespace}/{connection.app}/{kind.value}"
    if kind == ResourceKind.MISC:
        url = f"{url}/{name}"
    return url


def fetch_bytes(
    connector: Connector,
    url: str,
    timeout: Optional[float] = None,
    resource: Optional[str] = None,
) -> bytes:
    """
    GET a URL and return its body.

    Raises:
        AcquisitionError: On a transport error or any status other than 200
    """
    response = connector.fetch(ConnectorRequest(uri=url, method="GET", timeout=timeout))

    if not response.ok:
        if response.status_code == 0:
            message = response.error_message or f"transport error fetching {url}"
        else:
            message = f"unexpected status {response.status_code} from {url}"
        raise AcquisitionError(
            message,
            resource=resource,
            origin=url,
            status_code=response.status_code,
        )

    logger.debug(f"Fetched {len(response.content)} bytes from {url} in {response.duration_ms}ms")
    return response.content


class RemotePullSource:
    """Fetches resources from the backend API."""

    def __init__(self, connection: ConnectionContext, connector: Connector):
        self.connection = connection
        self.connector = connector

    def url_for(self, declaration: ResourceDeclaration) -> str:
        return resource_url(self.connection, declaration.kind, declaration.name)

    def fetch(self, declaration: ResourceDeclaration) -> bytes:
        """
        Fetch the raw, un-enveloped bytes of a resource.

        Raises:
            AcquisitionError: If the backend is unreachable or answers non-200
        """
        return fetch_bytes(
            self.connector,
            self.url_for(declaration),
            timeout=self.connection.socket_timeout,
            resource=declaration.describe(),
        )
