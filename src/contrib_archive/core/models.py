"""
Core data models for the contribution archiver.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


# Payloads are kept as the service returns them; only these keys are read.
Comment = Dict[str, Any]
CommentSet = List[Comment]


@dataclass
class ContributionSummary:
    """
    Lightweight view of a contribution, as listed by the service.

    Summaries are never persisted; only the full detail returned by
    findContribution is archived.

    Attributes:
        public_handle: Stable public identifier of the contribution
        active_version: Opaque version token of the current content
        comment_count: Number of comments, or None when unknown
        commentable_id: Identifier used to fetch the comment thread
    """
    public_handle: str
    active_version: Any = None
    comment_count: Optional[int] = None
    commentable_id: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ContributionSummary":
        """
        Build a summary from a list entry.

        Raises:
            ValueError: if the entry has no publicHandle
        """
        if not isinstance(payload, dict) or not payload.get("publicHandle"):
            raise ValueError("contribution entry has no publicHandle")
        return cls(
            public_handle=payload["publicHandle"],
            active_version=payload.get("activeVersion"),
            comment_count=payload.get("commentCount"),
            commentable_id=payload.get("commentableId"),
        )

    @classmethod
    def from_detail(cls, handle: str, detail: Dict[str, Any]) -> "ContributionSummary":
        """Fold a findContribution detail into a summary for ``handle``."""
        return cls(
            public_handle=handle,
            active_version=detail.get("activeVersion"),
            comment_count=detail.get("commentCount"),
            commentable_id=detail.get("commentableId"),
        )


def comment_id(comment: Comment) -> Any:
    """Return the unique id of a comment."""
    return comment.get("commentId")


def response_count(comment: Comment) -> int:
    """Return how many replies a comment has (0 when not reported)."""
    return comment.get("responseCount") or 0
