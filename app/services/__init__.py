"""
Services layer for data access and presence tracking.

This layer handles:
- Document store operations (participants, messages)
- Heartbeat recording and stale participant eviction
- Periodic background sweep scheduling
"""

from . import store
from . import message_service
from . import presence_tracker
from . import presence_monitor

__all__ = [
    "store",
    "message_service",
    "presence_tracker",
    "presence_monitor"
]
