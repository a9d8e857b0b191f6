"""
CodinGame services API client.
"""

from .codingame_client import CodinGameClient, DEFAULT_BASE_URL

__all__ = ["CodinGameClient", "DEFAULT_BASE_URL"]
