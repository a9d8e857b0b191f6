"""
Core abstractions and interfaces for the contribution archiver.
"""

from .models import (
    ContributionSummary, Comment, CommentSet, comment_id, response_count
)
from .connector import Connector, ConnectorRequest, ConnectorResponse
from .exceptions import ArchiveError, ConfigError, RequestFailed, StorageError

__all__ = [
    "ContributionSummary",
    "Comment",
    "CommentSet",
    "comment_id",
    "response_count",
    "Connector",
    "ConnectorRequest",
    "ConnectorResponse",
    "ArchiveError",
    "ConfigError",
    "RequestFailed",
    "StorageError",
]
