"""
HTTP connector used as the transport for the services API.
"""

import json
import logging
import time
from typing import Optional

import requests

from ...core.connector import Connector, ConnectorRequest, ConnectorResponse


logger = logging.getLogger(__name__)


class HttpConnector(Connector):
    """
    Generic HTTP connector for making HTTP requests.

    Supports:
    - GET and POST requests
    - Custom headers
    - Rate limiting

    Each fetch is a single round trip. Transport errors are reported as a
    response with status_code 0 rather than raised.
    """

    def __init__(
        self,
        name: str = "http",
        rate_limit_delay: float = 0.0,
        timeout: int = 30,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the HTTP connector.

        Args:
            name: Connector name
            rate_limit_delay: Minimum seconds between requests
            timeout: Request timeout in seconds
            user_agent: Custom User-Agent header
        """
        self.name = name
        self.rate_limit_delay = rate_limit_delay
        self.timeout = timeout
        self.user_agent = user_agent or "ContribArchive/1.0"
        self.last_request_time = 0.0
        self.session = requests.Session()

    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Fetch data via HTTP.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result
        """
        self._wait_for_rate_limit()

        headers = dict(request.headers or {})
        if "User-Agent" not in headers:
            headers["User-Agent"] = self.user_agent

        url = request.uri
        method = request.method.upper()
        start_time = time.time()
        try:
            if method == "GET":
                response = self.session.get(url, headers=headers, timeout=self.timeout)
            elif method == "POST":
                response = self.session.post(
                    url,
                    headers=headers,
                    data=request.body.encode("utf-8") if request.body is not None else None,
                    timeout=self.timeout,
                )
            else:
                raise ValueError(f"Unsupported HTTP method: {request.method}")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request to {url} failed: {e}")
            return ConnectorResponse(
                status_code=0,
                payload={},
                error_message=f"Request failed: {e}",
            )

        duration_ms = int((time.time() - start_time) * 1000)

        # Try to parse as JSON, fall back to text
        is_json = True
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            is_json = False
            payload = {
                "content_type": response.headers.get("Content-Type", "unknown"),
                "text": response.text,
                "encoding": response.encoding,
            }

        error_message = None
        if not 200 <= response.status_code < 300:
            error_message = f"HTTP {response.status_code} {response.reason or ''}".strip()

        return ConnectorResponse(
            status_code=response.status_code,
            payload=payload,
            headers=dict(response.headers),
            duration_ms=duration_ms,
            error_message=error_message,
            is_json=is_json,
        )

    def _wait_for_rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        if self.rate_limit_delay > 0:
            elapsed = time.time() - self.last_request_time
            if elapsed < self.rate_limit_delay:
                time.sleep(self.rate_limit_delay - elapsed)
        self.last_request_time = time.time()

    def get_name(self) -> str:
        """Return the connector name."""
        return self.name

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
