"""
HTTP connector backed by a requests session.
"""

import logging
import time
from typing import Dict, Optional

import requests

from ...core.connector import Connector, ConnectorRequest, ConnectorResponse


logger = logging.getLogger(__name__)


class HttpConnector(Connector):
    """
    HTTP connector for the Sailor backend and fallback origins.

    Issues exactly one request per fetch. Transport errors are reported in
    the response with status_code 0 instead of being raised.
    """

    def __init__(
        self,
        name: str = "http",
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP connector.

        Args:
            name: Connector name
            timeout: Default request timeout in seconds
            user_agent: Custom User-Agent header
            headers: Headers sent with every request
            session: Session to reuse (a new one is created if omitted)
        """
        self.name = name
        self.timeout = timeout
        self.user_agent = user_agent or "sailor-python/0.1"
        self.default_headers = dict(headers or {})
        self.session = session or requests.Session()

    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Fetch a URL.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the raw body
        """
        headers = dict(self.default_headers)
        headers.update(request.headers or {})
        headers.setdefault("User-Agent", self.user_agent)
        timeout = request.timeout if request.timeout is not None else self.timeout

        start_time = time.time()
        try:
            response = self.session.request(
                request.method.upper(),
                request.uri,
                headers=headers,
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f"Request to {request.uri} failed: {e}")
            return ConnectorResponse(
                status_code=0,
                error_message=f"Request failed: {e}",
                duration_ms=int((time.time() - start_time) * 1000),
            )

        duration_ms = int((time.time() - start_time) * 1000)
        error_message = None
        if response.status_code != 200:
            error_message = f"Unexpected status {response.status_code} from {request.uri}"

        return ConnectorResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            duration_ms=duration_ms,
            error_message=error_message,
        )

    def get_name(self) -> str:
        """Return the connector name."""
        return self.name

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
