# Participant schemas
from .participant import (
    ParticipantCreate,
    ParticipantResponse
)

# Message schemas
from .message import (
    MessageKind,
    MessageBase,
    MessageCreate,
    MessageUpdate,
    MessageDraft,
    MessageResponse
)

__all__ = [
    # Participant
    "ParticipantCreate",
    "ParticipantResponse",

    # Message
    "MessageKind",
    "MessageBase",
    "MessageCreate",
    "MessageUpdate",
    "MessageDraft",
    "MessageResponse",
]
