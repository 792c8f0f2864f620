from .participants import Participant
from .messages import Message

__all__ = [
    "Participant",
    "Message",
]
