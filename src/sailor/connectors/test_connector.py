"""
Test connector for exercising remote and fallback acquisition.

Serves canned bodies keyed by URL without any network access. Routes can
be changed while an engine is running, which lets tests drive poll loops
and fallback resolution deterministically.
"""

import json
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Union

from ..core.connector import Connector, ConnectorRequest, ConnectorResponse

logger = logging.getLogger(__name__)


Body = Union[bytes, str, dict, list]


class TestConnector(Connector):
    """
    Deterministic in-memory connector.

    Features:
    - Fixed responses per URL, replaceable at any time
    - Error simulation per URL (status code or transport failure)
    - Request history for assertions
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        routes: Optional[Dict[str, Body]] = None,
        simulate_latency_ms: int = 0,
    ):
        """
        Initialize the test connector.

        Args:
            routes: Mapping of URL to body; dicts and lists are JSON encoded
            simulate_latency_ms: Simulated latency in milliseconds
        """
        self.simulate_latency_ms = simulate_latency_ms
        self._lock = threading.Lock()
        self._routes: Dict[str, bytes] = {}
        self._failures: Dict[str, int] = {}
        self.request_history: List[ConnectorRequest] = []

        for url, body in (routes or {}).items():
            self.set_route(url, body)

    @staticmethod
    def _encode(body: Body) -> bytes:
        if isinstance(body, bytes):
            return body
        if isinstance(body, str):
            return body.encode("utf-8")
        return json.dumps(body).encode("utf-8")

    def set_route(self, url: str, body: Body) -> None:
        """Serve `body` with status 200 for `url`."""
        with self._lock:
            self._routes[url] = self._encode(body)
            self._failures.pop(url, None)

    def fail_route(self, url: str, status_code: int = 500) -> None:
        """Make `url` fail; status_code 0 simulates a transport error."""
        with self._lock:
            self._failures[url] = status_code

    def remove_route(self, url: str) -> None:
        with self._lock:
            self._routes.pop(url, None)
            self._failures.pop(url, None)

    def requests_for(self, url: str) -> List[ConnectorRequest]:
        """Requests issued for one URL, in order."""
        with self._lock:
            return [r for r in self.request_history if r.uri == url]

    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        start_time = time.time()

        with self._lock:
            self.request_history.append(request)
            failure = self._failures.get(request.uri)
            body = self._routes.get(request.uri)

        if self.simulate_latency_ms > 0:
            time.sleep(self.simulate_latency_ms / 1000.0)

        duration_ms = int((time.time() - start_time) * 1000)

        if failure is not None:
            logger.debug(f"Simulating failure {failure} for: {request.uri}")
            if failure == 0:
                return ConnectorResponse(
                    status_code=0,
                    error_message=f"Simulated transport error for {request.uri}",
                    duration_ms=duration_ms,
                )
            return ConnectorResponse(
                status_code=failure,
                content=b'{"error": "simulated"}',
                error_message=f"Simulated status {failure} for {request.uri}",
                duration_ms=duration_ms,
            )

        if body is None:
            return ConnectorResponse(
                status_code=404,
                content=b'{"error": "not found"}',
                error_message=f"Resource not found: {request.uri}",
                duration_ms=duration_ms,
            )

        return ConnectorResponse(
            status_code=200,
            content=body,
            headers={"Content-Type": "application/json", "X-Test-Connector": "true"},
            duration_ms=duration_ms,
        )

    def get_name(self) -> str:
        return "test"

    def reset(self) -> None:
        """Clear request history."""
        with self._lock:
            self.request_history.clear()
