"""
Configuration loading for the contribution archiver.
"""

from .config_loader import ArchiveConfig, SyncSettings, parse_handle_list

__all__ = ["ArchiveConfig", "SyncSettings", "parse_handle_list"]
