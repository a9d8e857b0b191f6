"""
Runner for the contribution sync cycle.
"""

from .sync_runner import SyncRunner

__all__ = ["SyncRunner"]
