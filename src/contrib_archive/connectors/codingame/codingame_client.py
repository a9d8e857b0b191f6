"""
Client for the CodinGame services API.

The services API is JSON-RPC style: every call is a POST to
``{base_url}/{Service}/{method}`` whose body is a JSON array of positional
arguments. Authentication rides on the session cookie.
"""

import json
import logging
from typing import Any, Dict, List

from ...core.connector import Connector, ConnectorRequest, ConnectorResponse
from ...core.exceptions import RequestFailed
from ...core.models import CommentSet


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://www.codingame.com/services"


class CodinGameClient:
    """
    Gateway to the five remote operations used by the archiver.

    Each operation is one round trip with no retry and no caching. Any
    transport failure, non-2xx status or wrongly shaped body is raised as
    RequestFailed carrying the operation name and status. Whether that is
    fatal is left to the caller.
    """

    def __init__(
        self,
        connector: Connector,
        session_cookie: str,
        user_id: int,
        base_url: str = DEFAULT_BASE_URL,
    ):
        """
        Initialize the client.

        Args:
            connector: Transport used for the round trips
            session_cookie: Opaque session token sent as the cookie header
            user_id: Numeric id of the user whose contributions are archived
            base_url: Services root URL
        """
        self.connector = connector
        self.session_cookie = session_cookie
        self.user_id = user_id
        self.base_url = base_url.rstrip("/")

    def get_all_pending_contributions(self) -> List[Dict[str, Any]]:
        """List the user's pending contributions."""
        return self._call_list(
            "Contribution", "getAllPendingContributions", [1, "ALL", self.user_id]
        )

    def get_accepted_contributions(self) -> List[Dict[str, Any]]:
        """List accepted contributions."""
        return self._call_list("Contribution", "getAcceptedContributions", ["ALL"])

    def find_contribution(self, public_handle: str) -> Dict[str, Any]:
        """Fetch the full detail of a contribution by its public handle."""
        payload = self._call("Contribution", "findContribution", [public_handle, True])
        if not isinstance(payload, dict):
            raise RequestFailed("findContribution", 200, "expected a JSON object")
        return payload

    def get_first_level_comments(self, commentable_id: Any) -> CommentSet:
        """Fetch top-level comments (with their first reply inlined)."""
        return self._call_list(
            "Comment", "getFirstLevelComments", [self.user_id, commentable_id]
        )

    def get_second_level_comments(self, comment_id: Any) -> CommentSet:
        """Fetch all replies to a comment."""
        return self._call_list(
            "Comment", "getSecondLevelComments", [self.user_id, comment_id]
        )

    def _call_list(self, service: str, method: str, args: List[Any]) -> List[Any]:
        payload = self._call(service, method, args)
        if not isinstance(payload, list):
            raise RequestFailed(method, 200, "expected a JSON array")
        return payload

    def _call(self, service: str, method: str, args: List[Any]) -> Any:
        request = ConnectorRequest(
            uri=f"{self.base_url}/{service}/{method}",
            method="POST",
            headers={
                "content-type": "application/json;charset=UTF-8",
                "cookie": self.session_cookie,
            },
            body=json.dumps(args),
            metadata={"operation": method},
        )

        response: ConnectorResponse = self.connector.fetch(request)
        logger.debug(
            f"{service}/{method} -> {response.status_code} ({response.duration_ms} ms)"
        )

        if not response.ok:
            raise RequestFailed(method, response.status_code, response.error_message)
        if not response.is_json:
            raise RequestFailed(method, response.status_code, "response is not JSON")
        return response.payload

    def close(self) -> None:
        """Close the underlying connector."""
        self.connector.close()
