"""
Connector interface for talking to the remote service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ConnectorRequest:
    """
    Request to be sent by a connector.

    Attributes:
        uri: The URI to fetch
        method: HTTP method (GET, POST, etc.)
        headers: Optional request headers
        body: Optional request body, already serialized
        metadata: Additional connector-specific metadata
    """
    uri: str
    method: str = "GET"
    headers: Optional[Dict[str, str]] = None
    body: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class ConnectorResponse:
    """
    Response from a connector.

    Attributes:
        status_code: HTTP status code (0 when the transport failed)
        payload: Decoded JSON body; arrays and objects are both allowed
        headers: Response headers
        duration_ms: Time taken for the request in milliseconds
        error_message: Error message if request failed
        is_json: False when the body could not be decoded as JSON and
            payload holds the wrapped text instead
    """
    status_code: int
    payload: Any
    headers: Optional[Dict[str, str]] = None
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None
    is_json: bool = True

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Connector(ABC):
    """
    Abstract base class for all connectors.

    Connectors perform one request/response round trip and report the
    outcome as a ConnectorResponse. They do not raise on HTTP errors.
    """

    @abstractmethod
    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Execute a single request.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the connector name/identifier."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass
