from beanie import Document, Indexed
from pydantic import Field


class Participant(Document):
    name: Indexed(str, unique=True) = Field(..., description="Participant name, unique within the room")
    last_seen: int = Field(..., description="Last heartbeat or join time (epoch ms)")

    class Settings:
        name = "participants"
        indexes = [
            [("last_seen", 1)],  # For the stale participant sweep
        ]

    def __repr__(self):
        return f"<Participant(name={self.name}, last_seen={self.last_seen})>"
