"""
File-based snapshot archive.

Layout::

    {base_dir}/contributions/{handle}/{timestamp}.json   full contribution detail
    {base_dir}/comments/{handle}/{timestamp}.json        array of comments
    {base_dir}/index.json                                derived listing

Snapshots are write-once. Filenames are UTC timestamps formatted so that
lexicographic order equals chronological order; the latest snapshot is
the one that sorts last.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import StorageError
from ..core.models import CommentSet


logger = logging.getLogger(__name__)


CONTRIBUTIONS = "contributions"
COMMENTS = "comments"
INDEX_FILENAME = "index.json"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
MAX_SEQUENCE = 99


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_safe_handle(handle: str) -> bool:
    """Return True if ``handle`` can be used as a single directory name."""
    return bool(handle) and handle not in (".", "..") and "/" not in handle and "\\" not in handle


class ArchiveStore:
    """
    Timestamp-versioned JSON storage for contribution and comment snapshots.

    The store is the only writer of its directory tree. Existing snapshot
    files are never modified or removed.
    """

    def __init__(
        self,
        base_dir: Path,
        pretty_print: bool = True,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize the store and create the namespace directories.

        Args:
            base_dir: Root directory of the archive
            pretty_print: Whether to indent JSON files
            clock: Source of the current time (UTC) used for filenames

        Raises:
            StorageError: if the directories cannot be created
        """
        self.base_dir = Path(base_dir)
        self.pretty_print = pretty_print
        self.clock = clock
        self.contributions_dir = self.base_dir / CONTRIBUTIONS
        self.comments_dir = self.base_dir / COMMENTS
        self.index_path = self.base_dir / INDEX_FILENAME

        for directory in (self.contributions_dir, self.comments_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(directory, f"Cannot create archive directory ({e})") from e

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def has_contribution_snapshot(self, handle: str) -> bool:
        """Return True if at least one contribution snapshot exists."""
        return bool(self._list_snapshots(self.contributions_dir, handle))

    def latest_contribution_snapshot(self, handle: str) -> Optional[Dict[str, Any]]:
        """Return the most recent contribution detail, or None."""
        return self._read_latest(self.contributions_dir, handle)

    def write_contribution_snapshot(self, handle: str, detail: Dict[str, Any]) -> Path:
        """Persist a contribution detail as a new snapshot."""
        return self._write_snapshot(self.contributions_dir, handle, detail)

    def list_contribution_snapshots(self, handle: str) -> List[str]:
        """Return contribution snapshot filenames, newest first."""
        return self._list_snapshots(self.contributions_dir, handle)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def has_comment_snapshot(self, handle: str) -> bool:
        """Return True if at least one comment snapshot exists."""
        return bool(self._list_snapshots(self.comments_dir, handle))

    def latest_comment_snapshot(self, handle: str) -> Optional[CommentSet]:
        """Return the most recent comment set, or None."""
        return self._read_latest(self.comments_dir, handle)

    def write_comment_snapshot(self, handle: str, comments: CommentSet) -> Path:
        """Persist a comment set as a new snapshot."""
        return self._write_snapshot(self.comments_dir, handle, comments)

    def list_comment_snapshots(self, handle: str) -> List[str]:
        """Return comment snapshot filenames, newest first."""
        return self._list_snapshots(self.comments_dir, handle)

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def rebuild_index(self) -> Dict[str, Dict[str, List[str]]]:
        """
        Rescan both namespaces and rewrite the aggregated index.

        Every handle directory is listed, including ones without any
        snapshot yet (empty list). The previous index is replaced.

        Returns:
            The index document that was written
        """
        index = {
            CONTRIBUTIONS: self._scan_namespace(self.contributions_dir),
            COMMENTS: self._scan_namespace(self.comments_dir),
        }

        try:
            self._dump(self.index_path, index, mode="w")
        except OSError as e:
            raise StorageError(self.index_path, f"Cannot write index ({e})") from e

        logger.info(
            f"Index rebuilt: {len(index[CONTRIBUTIONS])} contributions, "
            f"{len(index[COMMENTS])} comment threads"
        )
        return index

    def load_index(self) -> Optional[Dict[str, Dict[str, List[str]]]]:
        """Read the last written index, or None if there is none."""
        if not self.index_path.exists():
            return None
        with open(self.index_path, "r", encoding="utf-8") as f:
            return json.load(f)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _scan_namespace(self, namespace_dir: Path) -> Dict[str, List[str]]:
        if not namespace_dir.exists():
            return {}
        handles = sorted(p.name for p in namespace_dir.iterdir() if p.is_dir())
        return {handle: self._list_snapshots(namespace_dir, handle) for handle in handles}

    def _handle_dir(self, namespace_dir: Path, handle: str) -> Path:
        if not is_safe_handle(handle):
            raise ValueError(f"Invalid handle for archive path: {handle!r}")
        return namespace_dir / handle

    def _list_snapshots(self, namespace_dir: Path, handle: str) -> List[str]:
        handle_dir = self._handle_dir(namespace_dir, handle)
        if not handle_dir.is_dir():
            return []
        names = [
            p.name for p in handle_dir.iterdir()
            if p.is_file() and p.suffix == ".json" and p.name != INDEX_FILENAME
        ]
        return sorted(names, reverse=True)

    def _read_latest(self, namespace_dir: Path, handle: str) -> Any:
        snapshots = self._list_snapshots(namespace_dir, handle)
        if not snapshots:
            return None
        path = namespace_dir / handle / snapshots[0]
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(path, f"Cannot read snapshot ({e})") from e

    def _write_snapshot(self, namespace_dir: Path, handle: str, content: Any) -> Path:
        handle_dir = self._handle_dir(namespace_dir, handle)
        try:
            handle_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(handle_dir, f"Cannot create snapshot directory ({e})") from e

        stamp = self.clock().strftime(TIMESTAMP_FORMAT)
        for sequence in range(MAX_SEQUENCE + 1):
            # "_NN" sorts after ".json", so same-second writes keep their order
            name = f"{stamp}.json" if sequence == 0 else f"{stamp}_{sequence:02d}.json"
            path = handle_dir / name
            try:
                self._dump(path, content, mode="x")
            except FileExistsError:
                continue
            except OSError as e:
                raise StorageError(path, f"Cannot write snapshot ({e})") from e
            logger.debug(f"Wrote snapshot: {path}")
            return path

        raise StorageError(handle_dir, f"Too many snapshots within one second ({stamp})")

    def _dump(self, path: Path, content: Any, mode: str) -> None:
        indent = 2 if self.pretty_print else None
        with open(path, mode, encoding="utf-8") as f:
            json.dump(content, f, indent=indent, ensure_ascii=False)
            f.write("\n")
