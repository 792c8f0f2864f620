from datetime import datetime
from beanie import Document
from pydantic import Field


class Message(Document):
    sender: str = Field(..., description="Participant name who sent the message")
    to: str = Field(..., description="Recipient name or the room-wide broadcast target")
    text: str = Field(..., description="Message content")
    message_type: str = Field(..., description="Type of message: message, private_message, status")
    time: str = Field(..., description="Send time as HH:MM:SS")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "messages"
        indexes = [
            [("created_at", -1)],  # For recent message listing
            [("to", 1), ("created_at", -1)],  # For private messages by recipient
            [("sender", 1), ("created_at", -1)],  # For author lookups
        ]

    def __repr__(self):
        return f"<Message(id={self.id}, sender={self.sender}, to={self.to}, message_type={self.message_type})>"
