"""
Shared test fixtures and configuration for pytest.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from contrib_archive.connectors import CodinGameClient, StubConnector
from contrib_archive.runner import SyncRunner
from contrib_archive.storage import ArchiveStore


USER_ID = 4242
COOKIE = "rememberMe=test-session"


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "e2e: End-to-end runs over the stub connector")


# ============================================================================
# Helpers
# ============================================================================

def make_contribution(
    handle: str,
    version: Any = 1,
    comment_count: Any = 0,
    commentable_id: Any = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a contribution entry the way the services API lists it."""
    entry = {
        "publicHandle": handle,
        "activeVersion": version,
        "commentCount": comment_count,
        "commentableId": commentable_id if commentable_id is not None else f"c-{handle}",
        "title": f"Puzzle {handle}",
    }
    entry.update(extra)
    return entry


def make_comment(comment_id: int, response_count: int = 0, **extra: Any) -> Dict[str, Any]:
    """Build a comment entry."""
    comment = {
        "commentId": comment_id,
        "responseCount": response_count,
        "content": f"comment {comment_id}",
    }
    comment.update(extra)
    return comment


class FakeService:
    """
    In-memory model of the remote service wired into a StubConnector.

    Contributions are keyed by handle; comment threads by commentable id
    (first level) and by parent comment id (second level).
    """

    def __init__(self):
        self.pending: List[Dict[str, Any]] = []
        self.accepted: List[Dict[str, Any]] = []
        self.details: Dict[str, Dict[str, Any]] = {}
        self.first_level: Dict[Any, List[Dict[str, Any]]] = {}
        self.second_level: Dict[Any, List[Dict[str, Any]]] = {}
        self.connector = StubConnector({
            "Contribution/getAllPendingContributions": lambda args: list(self.pending),
            "Contribution/getAcceptedContributions": lambda args: list(self.accepted),
            "Contribution/findContribution": self._find,
            "Comment/getFirstLevelComments": lambda args: list(self.first_level.get(args[1], [])),
            "Comment/getSecondLevelComments": lambda args: list(self.second_level.get(args[1], [])),
        })

    def add(self, entry: Dict[str, Any], listed: str = "pending", comments=None) -> None:
        """Register a contribution, its detail and its first-level comments."""
        if listed == "pending":
            self.pending.append(entry)
        elif listed == "accepted":
            self.accepted.append(entry)
        self.details[entry["publicHandle"]] = dict(entry, statement="...")
        self.first_level[entry["commentableId"]] = list(comments or [])

    def _find(self, args: List[Any]) -> Dict[str, Any]:
        return self.details.get(args[0], {})


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def service() -> FakeService:
    """Fixture providing an empty fake service."""
    return FakeService()


@pytest.fixture
def client(service: FakeService) -> CodinGameClient:
    """Fixture providing an API client backed by the fake service."""
    return CodinGameClient(
        connector=service.connector,
        session_cookie=COOKIE,
        user_id=USER_ID,
        base_url="https://test.example.com/services",
    )


@pytest.fixture
def store(tmp_path: Path) -> ArchiveStore:
    """Fixture providing an archive store in a temporary directory."""
    return ArchiveStore(base_dir=tmp_path / "data")


@pytest.fixture
def runner(client: CodinGameClient, store: ArchiveStore) -> SyncRunner:
    """Fixture providing a sync runner over the fake service."""
    return SyncRunner(client=client, store=store)
