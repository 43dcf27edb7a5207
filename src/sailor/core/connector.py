"""
Connector interface for fetching resources from HTTP origins.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class ConnectorRequest:
    """
    Request to be sent by a connector.

    Attributes:
        uri: The URI to fetch
        method: HTTP method
        headers: Optional request headers
        timeout: Optional timeout in seconds, overrides the connector default
    """
    uri: str
    method: str = "GET"
    headers: Optional[Dict[str, str]] = None
    timeout: Optional[float] = None


@dataclass
class ConnectorResponse:
    """
    Response from a connector.

    Attributes:
        status_code: HTTP status code, 0 when the transport failed
        content: Raw response body
        headers: Response headers
        duration_ms: Time taken for the request in milliseconds
        error_message: Error message if the request failed
    """
    status_code: int
    content: bytes = b""
    headers: Optional[Dict[str, str]] = None
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True only for a 200 response without a transport error."""
        return self.status_code == 200 and self.error_message is None


class Connector(ABC):
    """
    Abstract base class for all connectors.

    Connectors issue a request and report status, body and error. They do
    not retry; retry policy belongs to the caller.
    """

    @abstractmethod
    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Fetch data from the origin.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result. Transport failures are
            reported through status_code 0 and error_message, not raised.
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the connector name/identifier."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass
