"""
Voice service data models: recognition state machine and events.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class VoiceState(str, Enum):
    """Recognition session state"""
    IDLE = "idle"
    RECORDING = "recording"


class VoiceEventKind(str, Enum):
    """Outcome delivered by the voice input bridge"""
    RESULT = "result"
    ERROR = "error"
    END = "end"


@dataclass(frozen=True)
class VoiceEvent:
    """Event emitted by a recognition session"""
    kind: VoiceEventKind
    transcript: Optional[str] = None
    error: Optional[str] = None  # reason code for ERROR events

    @classmethod
    def result(cls, transcript: str) -> 'VoiceEvent':
        return cls(VoiceEventKind.RESULT, transcript=transcript)

    @classmethod
    def failure(cls, reason: str) -> 'VoiceEvent':
        return cls(VoiceEventKind.ERROR, error=reason)

    @classmethod
    def end(cls) -> 'VoiceEvent':
        return cls(VoiceEventKind.END)


@dataclass(frozen=True)
class Utterance:
    """Text queued for speech synthesis, with the language it was requested in"""
    text: str
    language: str
    requested_at: datetime = field(default_factory=datetime.now)
