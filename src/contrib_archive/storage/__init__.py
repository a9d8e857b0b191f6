"""
Storage implementations for persisting snapshots.
"""

from .archive_store import ArchiveStore, INDEX_FILENAME, TIMESTAMP_FORMAT, is_safe_handle

__all__ = ["ArchiveStore", "INDEX_FILENAME", "TIMESTAMP_FORMAT", "is_safe_handle"]
