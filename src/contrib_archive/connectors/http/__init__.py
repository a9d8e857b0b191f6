"""
HTTP connector for raw HTTP fetching.
"""

from .http_connector import HttpConnector

__all__ = ["HttpConnector"]
