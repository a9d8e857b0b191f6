"""
Contribution archiver.

Pulls a user's contributions and their comment threads from the CodinGame
services API and keeps every observed version as a timestamped JSON
snapshot on disk.
"""

__version__ = "1.0.0"
