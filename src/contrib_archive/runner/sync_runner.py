"""
Sync orchestrator for the contribution archive.
"""

import json
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from ..connectors.codingame import CodinGameClient
from ..core.exceptions import RequestFailed
from ..core.models import (
    CommentSet, ContributionSummary, comment_id, response_count
)
from ..storage import ArchiveStore, is_safe_handle


logger = logging.getLogger(__name__)


# The first reply is inlined in first-level comments; more need a second call.
SECOND_LEVEL_THRESHOLD = 2


class SyncRunner:
    """
    Drives one update cycle.

    Manages the workflow:
    1. Merge pending and accepted contributions (first occurrence wins)
    2. Resolve extra handles that were not listed
    3. Apply the optional test filter
    4. For each contribution, archive a new detail snapshot when the
       version changed and a new comment snapshot when the count changed
    5. Rebuild the index

    Per-handle request failures are logged and skipped. Storage errors
    propagate.
    """

    def __init__(self, client: CodinGameClient, store: ArchiveStore):
        """
        Initialize the sync runner.

        Args:
            client: Gateway to the services API
            store: Snapshot archive
        """
        self.client = client
        self.store = store
        self.metrics: Dict[str, Any] = self._new_metrics()

    def sync(
        self,
        extra_handles: Optional[Iterable[str]] = None,
        test_handles: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Fetch both contribution lists and run the update cycle.

        Raises:
            RequestFailed: if either list cannot be fetched
        """
        logger.info("Fetching contributions...")
        pending = self.client.get_all_pending_contributions()
        accepted = self.client.get_accepted_contributions()
        return self.run(pending, accepted, extra_handles, test_handles)

    def run(
        self,
        pending: List[Dict[str, Any]],
        accepted: List[Dict[str, Any]],
        extra_handles: Optional[Iterable[str]] = None,
        test_handles: Optional[Iterable[str]] = None,
        run_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run the update cycle over already fetched contribution lists.

        Args:
            pending: Raw pending contribution entries
            accepted: Raw accepted contribution entries
            extra_handles: Handles to resolve individually if not listed
            test_handles: If given, only these handles are processed
            run_id: Optional run identifier

        Returns:
            Dictionary with run statistics
        """
        if run_id is None:
            run_id = str(uuid.uuid4())

        self.metrics = self._new_metrics(run_id)

        summaries = self.merge_summaries(pending, accepted)
        logger.info(f"Found {len(summaries)} contributions (pending + accepted).")

        if extra_handles:
            summaries = self.resolve_extra_handles(summaries, extra_handles)

        if test_handles:
            summaries = self.apply_test_filter(summaries, test_handles)

        for summary in summaries:
            self.metrics["contributions_seen"] += 1
            self.process(summary)

        logger.info("Generating index...")
        self.store.rebuild_index()

        logger.info(f"Run complete: {run_id}")
        logger.info(f"Metrics: {json.dumps(self.metrics, indent=2)}")
        return self.metrics

    def merge_summaries(
        self,
        *lists: List[Dict[str, Any]],
    ) -> List[ContributionSummary]:
        """Union raw contribution lists, deduplicated by handle."""
        summaries: Dict[str, ContributionSummary] = {}
        for entries in lists:
            for entry in entries:
                try:
                    summary = ContributionSummary.from_payload(entry)
                except ValueError as e:
                    logger.warning(f"Skipping contribution entry: {e}")
                    continue
                if not is_safe_handle(summary.public_handle):
                    logger.warning(
                        f"Skipping contribution with unusable handle: {summary.public_handle!r}"
                    )
                    continue
                summaries.setdefault(summary.public_handle, summary)
        return list(summaries.values())

    def resolve_extra_handles(
        self,
        summaries: List[ContributionSummary],
        extra_handles: Iterable[str],
    ) -> List[ContributionSummary]:
        """Append summaries for extra handles not already present."""
        extra_handles = list(extra_handles)
        logger.info(f"Fetching {len(extra_handles)} extra handles...")

        result = list(summaries)
        known = {s.public_handle for s in result}
        for handle in extra_handles:
            if handle in known:
                continue
            if not is_safe_handle(handle):
                logger.warning(f"Skipping extra handle with unusable value: {handle!r}")
                continue
            try:
                detail = self.client.find_contribution(handle)
            except RequestFailed as e:
                self.metrics["failures"] += 1
                logger.error(f"Failed to fetch extra handle {handle}: {e}")
                continue
            result.append(ContributionSummary.from_detail(handle, detail))
            known.add(handle)
            self.metrics["extra_resolved"] += 1
        return result

    def apply_test_filter(
        self,
        summaries: List[ContributionSummary],
        test_handles: Iterable[str],
    ) -> List[ContributionSummary]:
        """Keep only the summaries whose handle is in ``test_handles``."""
        wanted = list(test_handles)
        logger.info(f"Testing with specific handles: {', '.join(wanted)}")

        filtered = [s for s in summaries if s.public_handle in wanted]
        matched = {s.public_handle for s in filtered}
        unmatched = [h for h in wanted if h not in matched]
        if unmatched:
            logger.warning(f"Test handles not found: {', '.join(unmatched)}")

        logger.info(f"Matched {len(filtered)} contributions for testing.")
        return filtered

    def needs_contribution_update(self, summary: ContributionSummary) -> bool:
        """Decide whether a new contribution snapshot is due."""
        handle = summary.public_handle
        if not self.store.has_contribution_snapshot(handle):
            logger.info(f"New contribution found: {handle}")
            return True

        last_saved = self.store.latest_contribution_snapshot(handle)
        last_version = last_saved.get("activeVersion") if isinstance(last_saved, dict) else None
        if last_version != summary.active_version:
            logger.info(
                f"Contribution updated: {handle} "
                f"(version: {last_version} -> {summary.active_version})"
            )
            return True
        return False

    def needs_comments_update(self, summary: ContributionSummary) -> bool:
        """Decide whether a new comment snapshot is due."""
        last_comments = self.store.latest_comment_snapshot(summary.public_handle)
        if last_comments is None:
            logger.info(f"No comments archived yet for {summary.public_handle}")
            return True

        if summary.comment_count is not None and len(last_comments) != summary.comment_count:
            logger.info(
                f"Comments updated for {summary.public_handle}: "
                f"{len(last_comments)} -> {summary.comment_count}"
            )
            return True
        return False

    def process(self, summary: ContributionSummary) -> None:
        """Archive whatever changed for one contribution."""
        handle = summary.public_handle

        if self.needs_contribution_update(summary):
            try:
                detail = self.client.find_contribution(handle)
            except RequestFailed as e:
                self.metrics["failures"] += 1
                logger.error(f"Failed to fetch detail for {handle}: {e}")
            else:
                self.store.write_contribution_snapshot(handle, detail)
                self.metrics["contributions_updated"] += 1

        if self.needs_comments_update(summary):
            try:
                comments = self.collect_comments(summary)
            except RequestFailed as e:
                self.metrics["failures"] += 1
                logger.error(f"Failed to fetch comments for {handle}: {e}")
            else:
                self.store.write_comment_snapshot(handle, comments)
                self.metrics["comments_updated"] += 1

    def collect_comments(self, summary: ContributionSummary) -> CommentSet:
        """
        Fetch the full comment set of a contribution.

        First-level comments take precedence; replies fetched separately are
        appended only when their commentId is not present yet. A failed
        reply fetch is logged and skipped.

        Raises:
            RequestFailed: if the first-level comments cannot be fetched
        """
        comments = list(self.client.get_first_level_comments(summary.commentable_id))
        seen = {comment_id(c) for c in comments}

        for parent in list(comments):
            if response_count(parent) < SECOND_LEVEL_THRESHOLD:
                continue
            try:
                replies = self.client.get_second_level_comments(comment_id(parent))
            except RequestFailed as e:
                self.metrics["failures"] += 1
                logger.error(
                    f"Failed to fetch second level comments for comment "
                    f"{comment_id(parent)} of {summary.public_handle}: {e}"
                )
                continue

            for reply in replies:
                if comment_id(reply) not in seen:
                    comments.append(reply)
                    seen.add(comment_id(reply))

        return comments

    def _new_metrics(self, run_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "run_id": run_id,
            "contributions_seen": 0,
            "contributions_updated": 0,
            "comments_updated": 0,
            "extra_resolved": 0,
            "failures": 0,
        }
