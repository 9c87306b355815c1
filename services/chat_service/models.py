"""
Chat service data models for conversations and messages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any


class MessageRole(str, Enum):
    """Who authored a message"""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """Individual message in a conversation"""
    role: MessageRole
    content: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_api_dict(self) -> Dict[str, str]:
        """Role/content pair sent to the dialogue backend (timestamp stripped)"""
        return {"role": self.role.value, "content": self.content}

    def to_record(self) -> Dict[str, Any]:
        """Persisted form of the message"""
        return {
            "role": self.role.value,
            "content": self.content,
            "created_at": self.created_at.isoformat()
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Message':
        """
        Build a message from its persisted form

        Raises:
            ValueError: If the role or timestamp is not recognised
        """
        created_at = record.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        elif not isinstance(created_at, datetime):
            raise ValueError(f"Invalid created_at: {created_at!r}")

        return cls(
            role=MessageRole(record["role"]),
            content=record.get("content") or "",
            created_at=created_at
        )


@dataclass(frozen=True)
class Location:
    """Geographic position shared by the user"""
    latitude: float
    longitude: float

    def to_announcement(self) -> str:
        """Fixed-format message content announcing this location"""
        return f"📍 Location shared: {self.latitude}, {self.longitude}"
