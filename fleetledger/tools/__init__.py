"""
Collaborator integrations for the settlement engine.

This module provides:
- Load and dispute stores
- Partner company trust lookup
- Driver notification senders
"""

from .notifications import LoggingNotifier, Notification, Notifier, RecordingNotifier
from .stores import DisputeStore, InMemoryDisputeStore, InMemoryLoadStore, LoadStore
from .trust import StaticTrustDirectory, TrustDirectory

__all__ = [
    "Notifier",
    "Notification",
    "LoggingNotifier",
    "RecordingNotifier",
    "LoadStore",
    "DisputeStore",
    "InMemoryLoadStore",
    "InMemoryDisputeStore",
    "TrustDirectory",
    "StaticTrustDirectory",
]
