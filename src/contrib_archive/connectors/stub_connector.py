"""
Stub connector for offline runs and tests.

Answers services API calls from an in-memory table instead of the
network, so the full sync path can be exercised deterministically.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..core.connector import Connector, ConnectorRequest, ConnectorResponse

logger = logging.getLogger(__name__)


# A response is either a fixed payload or a callable receiving the
# positional argument list of the call.
Responder = Union[Any, Callable[[List[Any]], Any]]


class StubConnector(Connector):
    """
    Deterministic connector keyed by ``Service/method`` route.

    Features:
    - Fixed or argument-dependent responses per route
    - Failure injection per route, optionally only for calls that carry a
      given argument
    - Request history for assertions
    """

    def __init__(self, responses: Optional[Dict[str, Responder]] = None):
        """
        Initialize the stub connector.

        Args:
            responses: Mapping of ``Service/method`` to payload or callable
        """
        self.responses: Dict[str, Responder] = dict(responses or {})
        self._failures: List[Tuple[str, Any, int]] = []
        self.request_history: List[ConnectorRequest] = []

    def respond(self, route: str, responder: Responder) -> None:
        """Register the response for a route."""
        self.responses[route] = responder

    def fail_on(self, route: str, arg: Any = None, status_code: int = 500) -> None:
        """
        Make calls to ``route`` fail.

        Args:
            route: ``Service/method`` route
            arg: Only fail calls whose argument list contains this value
                (None fails every call)
            status_code: Status to report; 0 simulates a transport error
        """
        self._failures.append((route, arg, status_code))

    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """Answer a request from the response table."""
        self.request_history.append(request)

        route = "/".join(request.uri.rstrip("/").split("/")[-2:])
        args = json.loads(request.body) if request.body else []

        for failing_route, arg, status_code in self._failures:
            if failing_route == route and (arg is None or arg in args):
                logger.debug(f"Simulated failure for {route} {args}")
                return ConnectorResponse(
                    status_code=status_code,
                    payload={"error": "simulated failure"},
                    error_message=f"Simulated failure (HTTP {status_code})",
                )

        if route not in self.responses:
            return ConnectorResponse(
                status_code=404,
                payload={"error": f"unknown route {route}"},
                error_message="HTTP 404 Not Found",
            )

        responder = self.responses[route]
        payload = responder(args) if callable(responder) else responder
        return ConnectorResponse(status_code=200, payload=payload, duration_ms=0)

    def calls_to(self, route: str) -> List[List[Any]]:
        """Return the argument lists of every call made to ``route``."""
        calls = []
        for request in self.request_history:
            if request.uri.endswith("/" + route):
                calls.append(json.loads(request.body) if request.body else [])
        return calls

    def reset(self) -> None:
        """Clear request history."""
        self.request_history = []

    def get_name(self) -> str:
        return "stub"
