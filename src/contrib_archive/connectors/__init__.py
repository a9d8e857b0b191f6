"""
Connectors package for the services API.
"""

from .http import HttpConnector
from .codingame import CodinGameClient, DEFAULT_BASE_URL
from .stub_connector import StubConnector

__all__ = [
    "HttpConnector",
    "CodinGameClient",
    "DEFAULT_BASE_URL",
    "StubConnector",
]
