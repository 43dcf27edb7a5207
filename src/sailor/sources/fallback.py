"""
Fallback resolver: a secondary origin consulted when a primary source fails.
"""

import logging
import os
from typing import Optional

from ..core.connector import Connector
from ..core.exceptions import AcquisitionError, FallbackExhaustedError
from ..core.models import ENV_SAILOR_FALLBACK_BASE_URL, ConnectionContext, ResourceDeclaration, ResourceKind
from .remote import fetch_bytes


logger = logging.getLogger(__name__)


def fallback_url(base_url: str, app: str, kind: ResourceKind) -> str:
    """`{base}/{app}-{kind}.sailor.fall`"""
    return f"{base_url.rstrip('/')}/{app}-{kind.value}.sailor.fall"


class FallbackResolver:
    """
    Fetches a resource from the fallback origin.

    The base URL is fixed when the resolver is built; the environment is
    not consulted again per call.
    """

    def __init__(
        self,
        connection: ConnectionContext,
        connector: Connector,
        base_url: Optional[str] = None,
    ):
        self.connection = connection
        self.connector = connector
        self.base_url = base_url or None

    @classmethod
    def from_env(cls, connection: ConnectionContext, connector: Connector) -> "FallbackResolver":
        return cls(connection, connector, os.environ.get(ENV_SAILOR_FALLBACK_BASE_URL))

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def url_for(self, kind: ResourceKind) -> str:
        if not self.base_url:
            raise FallbackExhaustedError("no fallback base URL is configured")
        return fallback_url(self.base_url, self.connection.app, kind)

    def fetch(self, declaration: ResourceDeclaration, primary_error: Optional[Exception] = None) -> bytes:
        """
        Make exactly one fallback attempt for a resource.

        Args:
            declaration: Resource whose primary source failed
            primary_error: Why the primary failed, kept on the raised error

        Returns:
            Raw, un-enveloped bytes from the fallback origin

        Raises:
            FallbackExhaustedError: If fallback is disabled for the resource,
                no base URL is configured, or the fetch fails
        """
        resource = declaration.describe()

        if not declaration.fallback_enabled:
            raise FallbackExhaustedError(
                f"cannot serve {resource}: primary failed and fallback is disabled",
                resource=resource,
                primary_error=primary_error,
            )
        if not self.configured:
            raise FallbackExhaustedError(
                f"cannot serve {resource}: primary failed and no fallback is configured",
                resource=resource,
                primary_error=primary_error,
            )

        url = self.url_for(declaration.kind)
        logger.info(f"Fetching {resource} from fallback {url}")
        try:
            return fetch_bytes(
                self.connector,
                url,
                timeout=self.connection.socket_timeout,
                resource=resource,
            )
        except AcquisitionError as e:
            raise FallbackExhaustedError(
                f"cannot serve {resource}: fallback fetch failed: {e}",
                resource=resource,
                primary_error=primary_error,
            ) from e
